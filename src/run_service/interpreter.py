from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

import msgspec

from .contracts import ServiceError
from .errors import ProtocolErrorKind

logger = logging.getLogger(__name__)

NOT_FOUND = 404
CONFLICT = 409
UNPROCESSABLE_ENTITY = 422


@dataclass(frozen=True)
class ErrorPolicy:
    """
    Which failures an operation knows how to name.

    structured: keyed by the statusCode inside a trusted error envelope.
    legacy: keyed by the HTTP status, for servers that predate the envelope.
    """

    structured: Mapping[int, ProtocolErrorKind] = field(default_factory=dict)
    legacy: Mapping[int, ProtocolErrorKind] = field(default_factory=dict)


ACQUIRE_POLICY = ErrorPolicy(
    structured={
        NOT_FOUND: ProtocolErrorKind.JOB_NOT_FOUND,
        CONFLICT: ProtocolErrorKind.JOB_ALREADY_ACQUIRED,
        UNPROCESSABLE_ENTITY: ProtocolErrorKind.JOB_UNPROCESSABLE,
    },
    legacy={
        NOT_FOUND: ProtocolErrorKind.JOB_NOT_FOUND,
        CONFLICT: ProtocolErrorKind.JOB_ALREADY_ACQUIRED,
    },
)

# Renew and complete only ever reported a missing job; Conflict/Unprocessable
# are not mapped for them.
RENEW_POLICY = ErrorPolicy(legacy={NOT_FOUND: ProtocolErrorKind.JOB_NOT_FOUND})
COMPLETE_POLICY = ErrorPolicy(legacy={NOT_FOUND: ProtocolErrorKind.JOB_NOT_FOUND})


@dataclass(frozen=True)
class FailureClassification:
    kind: ProtocolErrorKind
    status: int
    body: Optional[str] = None
    service_error: Optional[ServiceError] = None

    @property
    def structured(self) -> bool:
        return self.service_error is not None

    @property
    def detail(self) -> Optional[str]:
        if self.service_error is None:
            return None
        return self.service_error.message


def parse_service_error(body: Optional[str]) -> Optional[ServiceError]:
    """Return the error envelope only when it decodes and names the run service as its source."""
    if not body:
        return None
    try:
        err = msgspec.json.decode(body, type=ServiceError)
    except msgspec.DecodeError:
        return None
    if not err.is_trusted():
        logger.debug(f"ignoring error envelope from untrusted source {err.source!r}")
        return None
    return err


def interpret_failure(status: int, body: Optional[str], policy: ErrorPolicy) -> FailureClassification:
    """
    Classify a non-success response.

    A trusted envelope is consulted first and its embedded statusCode wins over
    the HTTP status; otherwise the HTTP status alone decides. Anything left
    unnamed is a transport failure carrying the raw body.
    """
    body = body or None
    err = parse_service_error(body)
    if err is not None:
        kind = policy.structured.get(err.status_code)
        if kind is not None:
            return FailureClassification(kind=kind, status=status, body=body, service_error=err)

    kind = policy.legacy.get(status)
    if kind is not None:
        return FailureClassification(kind=kind, status=status, body=body)

    return FailureClassification(kind=ProtocolErrorKind.TRANSPORT, status=status, body=body)


__all__ = [
    "NOT_FOUND",
    "CONFLICT",
    "UNPROCESSABLE_ENTITY",
    "ErrorPolicy",
    "ACQUIRE_POLICY",
    "RENEW_POLICY",
    "COMPLETE_POLICY",
    "FailureClassification",
    "parse_service_error",
    "interpret_failure",
]
