from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, Optional

from .client import RunServiceClient
from .errors import LeaseRequestCanceledError, RunServiceTransportError

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 60.0  # seconds


async def keep_lease_alive(
    client: RunServiceClient,
    request_uri: str,
    plan_id: uuid.UUID | str,
    job_id: uuid.UUID | str,
    *,
    stop: asyncio.Event,
    interval_s: float = HEARTBEAT_INTERVAL,
    on_renewed: Optional[Callable[[Dict[str, Any]], None]] = None,
    max_consecutive_failures: int = 3,
) -> int:
    """
    Renew one job's lease every interval_s until stop is set.

    Renewals run one at a time. JobNotFoundError is raised straight away (the
    lease is gone). Transport failures are retried on the next tick and only
    raised once max_consecutive_failures happen in a row. Returns the number
    of successful renewals.
    """
    if interval_s <= 0:
        raise ValueError("interval_s must be > 0")
    renewals = 0
    failures = 0
    while not stop.is_set():
        try:
            response = await client.renew_job(request_uri, plan_id, job_id, cancel_event=stop)
        except LeaseRequestCanceledError:
            break
        except RunServiceTransportError as exc:
            failures += 1
            if failures >= max_consecutive_failures:
                raise
            logger.warning(f"Lease renewal for job {job_id} failed ({failures}/{max_consecutive_failures}): {exc}")
        else:
            failures = 0
            renewals += 1
            if on_renewed is not None:
                on_renewed(response)

        try:
            await asyncio.wait_for(stop.wait(), timeout=interval_s)
        except asyncio.TimeoutError:
            pass
    return renewals


__all__ = ["HEARTBEAT_INTERVAL", "keep_lease_alive"]
