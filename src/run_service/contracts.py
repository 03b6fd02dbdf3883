from __future__ import annotations

import enum
import uuid
from typing import Any, Dict, List

import msgspec

# Errors carrying any other source came from something else on the same host
# and must not be trusted as run-service errors.
RUN_SERVICE_ERROR_SOURCE = "actions-run-service"

ACQUIRE_JOB_PATH = "acquirejob"
RENEW_JOB_PATH = "renewjob"
COMPLETE_JOB_PATH = "completejob"


class TaskResult(str, enum.Enum):
    """Job conclusion reported on completion."""

    SUCCEEDED = "succeeded"
    SUCCEEDED_WITH_ISSUES = "succeededWithIssues"
    FAILED = "failed"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    ABANDONED = "abandoned"


class AcquireJobRequest(msgspec.Struct, frozen=True, rename={"job_message_id": "jobMessageId", "runner_os": "runnerOS"}):
    job_message_id: str
    runner_os: str


class RenewJobRequest(msgspec.Struct, frozen=True, rename="camel"):
    plan_id: uuid.UUID
    job_id: uuid.UUID


class CompleteJobRequest(msgspec.Struct, frozen=True, rename="camel"):
    """
    Final record of a finished job.

    outputs/step_results/annotations are built by the caller and carried
    as-is; anything msgspec can encode (dicts, lists, Structs) is accepted.
    """

    plan_id: uuid.UUID
    job_id: uuid.UUID
    conclusion: TaskResult
    outputs: Dict[str, Any]
    step_results: List[Any]
    annotations: List[Any]
    environment_url: str


class ServiceError(msgspec.Struct, frozen=True, rename="camel"):
    """Structured error envelope returned by newer run-service deployments."""

    source: str = ""
    status_code: int = 0
    message: str = ""

    def is_trusted(self) -> bool:
        return self.source == RUN_SERVICE_ERROR_SOURCE


def encode_request(payload: msgspec.Struct) -> bytes:
    return msgspec.json.encode(payload)


def decode_object(body: bytes) -> Dict[str, Any]:
    """
    Decode an opaque JSON object (job message, renewal acknowledgment).

    No target type is given, so numbers and date-like strings come back
    exactly as the server wrote them.
    """
    if not body:
        raise ValueError("empty response body")
    data = msgspec.json.decode(body)
    if not isinstance(data, dict):
        raise ValueError("unexpected response shape")
    return data


def coerce_uuid(value: uuid.UUID | str, name: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    s = str(value or "").strip()
    if not s:
        raise ValueError(f"{name} is required")
    try:
        return uuid.UUID(s)
    except ValueError as exc:
        raise ValueError(f"{name} must be a UUID: {value!r}") from exc


__all__ = [
    "RUN_SERVICE_ERROR_SOURCE",
    "ACQUIRE_JOB_PATH",
    "RENEW_JOB_PATH",
    "COMPLETE_JOB_PATH",
    "TaskResult",
    "AcquireJobRequest",
    "RenewJobRequest",
    "CompleteJobRequest",
    "ServiceError",
    "encode_request",
    "decode_object",
    "coerce_uuid",
]
