from __future__ import annotations

import enum
from typing import Dict, Optional, Type


class ProtocolErrorKind(str, enum.Enum):
    JOB_NOT_FOUND = "job_not_found"
    JOB_ALREADY_ACQUIRED = "job_already_acquired"
    JOB_UNPROCESSABLE = "job_unprocessable"
    TRANSPORT = "transport"
    CANCELED = "canceled"


class LeaseProtocolError(RuntimeError):
    """
    Base for every outcome of a failed acquire/renew/complete call.

    status is the HTTP status (None when no response arrived), body the raw
    response text, detail the message from a trusted error envelope.
    """

    kind: ProtocolErrorKind = ProtocolErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        body: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.detail = detail


class JobNotFoundError(LeaseProtocolError):
    kind = ProtocolErrorKind.JOB_NOT_FOUND


class JobAlreadyAcquiredError(LeaseProtocolError):
    kind = ProtocolErrorKind.JOB_ALREADY_ACQUIRED


class JobUnprocessableError(LeaseProtocolError):
    kind = ProtocolErrorKind.JOB_UNPROCESSABLE


class RunServiceTransportError(LeaseProtocolError):
    kind = ProtocolErrorKind.TRANSPORT


class LeaseRequestCanceledError(LeaseProtocolError):
    kind = ProtocolErrorKind.CANCELED


_ERROR_TYPES: Dict[ProtocolErrorKind, Type[LeaseProtocolError]] = {
    ProtocolErrorKind.JOB_NOT_FOUND: JobNotFoundError,
    ProtocolErrorKind.JOB_ALREADY_ACQUIRED: JobAlreadyAcquiredError,
    ProtocolErrorKind.JOB_UNPROCESSABLE: JobUnprocessableError,
    ProtocolErrorKind.TRANSPORT: RunServiceTransportError,
    ProtocolErrorKind.CANCELED: LeaseRequestCanceledError,
}


def error_type_for(kind: ProtocolErrorKind) -> Type[LeaseProtocolError]:
    return _ERROR_TYPES[kind]


__all__ = [
    "ProtocolErrorKind",
    "LeaseProtocolError",
    "JobNotFoundError",
    "JobAlreadyAcquiredError",
    "JobUnprocessableError",
    "RunServiceTransportError",
    "LeaseRequestCanceledError",
    "error_type_for",
]
