# Make src/run_service a Python package
from .client import RunServiceClient
from .config import RunServiceSettings
from .contracts import (
    RUN_SERVICE_ERROR_SOURCE,
    AcquireJobRequest,
    CompleteJobRequest,
    RenewJobRequest,
    ServiceError,
    TaskResult,
)
from .errors import (
    JobAlreadyAcquiredError,
    JobNotFoundError,
    JobUnprocessableError,
    LeaseProtocolError,
    LeaseRequestCanceledError,
    ProtocolErrorKind,
    RunServiceTransportError,
)
from .heartbeat import keep_lease_alive
from .interpreter import FailureClassification, interpret_failure

__all__ = [
    "RunServiceClient",
    "RunServiceSettings",
    "RUN_SERVICE_ERROR_SOURCE",
    "AcquireJobRequest",
    "CompleteJobRequest",
    "RenewJobRequest",
    "ServiceError",
    "TaskResult",
    "ProtocolErrorKind",
    "LeaseProtocolError",
    "JobNotFoundError",
    "JobAlreadyAcquiredError",
    "JobUnprocessableError",
    "RunServiceTransportError",
    "LeaseRequestCanceledError",
    "FailureClassification",
    "interpret_failure",
    "keep_lease_alive",
]
