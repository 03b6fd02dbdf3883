from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple
from urllib.parse import urljoin

import aiohttp
import msgspec

from .contracts import (
    ACQUIRE_JOB_PATH,
    COMPLETE_JOB_PATH,
    RENEW_JOB_PATH,
    AcquireJobRequest,
    CompleteJobRequest,
    RenewJobRequest,
    TaskResult,
    coerce_uuid,
    decode_object,
    encode_request,
)
from .errors import (
    LeaseProtocolError,
    LeaseRequestCanceledError,
    ProtocolErrorKind,
    RunServiceTransportError,
    error_type_for,
)
from .interpreter import ACQUIRE_POLICY, COMPLETE_POLICY, RENEW_POLICY, FailureClassification, interpret_failure

logger = logging.getLogger(__name__)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


def _body_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class RunServiceClient:
    """
    Run service job lease APIs (acquire/renew/complete).

    Endpoints, relative to the request URI handed to each call:
      - POST acquirejob  {jobMessageId, runnerOS}                 -> job message
      - POST renewjob    {planId, jobId}                          -> renewal ack
      - POST completejob {planId, jobId, conclusion, outputs, ...} -> 2xx

    The client keeps no per-job state. plan_id/job_id are threaded through by
    the caller, and every call opens its own session and does one round trip
    with no retries.
    """

    def __init__(self, token: Optional[str] = None, timeout_s: Optional[float] = None) -> None:
        self.token = (token or "").strip() or None
        self.timeout_s = timeout_s if timeout_s and timeout_s > 0 else None

    def _headers(self) -> Dict[str, str]:
        h: Dict[str, str] = {"Content-Type": "application/json"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    async def acquire_job(
        self,
        request_uri: str,
        message_id: str,
        runner_os: str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Dict[str, Any]:
        """Claim the queued job message and return the job descriptor as sent by the server."""
        message_id = (message_id or "").strip()
        runner_os = (runner_os or "").strip()
        if not message_id or not runner_os:
            raise ValueError("message_id/runner_os required")

        payload = AcquireJobRequest(job_message_id=message_id, runner_os=runner_os)
        status, raw = await self._post(request_uri, ACQUIRE_JOB_PATH, payload, cancel_event=cancel_event)
        if _is_success(status):
            message = self._decode_success(status, raw, what="job message")
            logger.info(f"Acquired job message {message_id}")
            return message

        c = interpret_failure(status, _body_text(raw), ACQUIRE_POLICY)
        if c.structured:
            messages = {
                ProtocolErrorKind.JOB_NOT_FOUND: f"Job message not found '{message_id}'. {c.detail}",
                ProtocolErrorKind.JOB_ALREADY_ACQUIRED: f"Job message already acquired '{message_id}'. {c.detail}",
                ProtocolErrorKind.JOB_UNPROCESSABLE: f"Unprocessable job '{message_id}'. {c.detail}",
            }
        else:
            messages = {
                ProtocolErrorKind.JOB_NOT_FOUND: f"Job message not found: {message_id}",
                ProtocolErrorKind.JOB_ALREADY_ACQUIRED: f"Job message already acquired: {message_id}",
            }
        raise self._error(c, messages, failed="Failed to get job message")

    async def renew_job(
        self,
        request_uri: str,
        plan_id: uuid.UUID | str,
        job_id: uuid.UUID | str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Dict[str, Any]:
        """
        Heartbeat for an acquired job.

        Returns the renewal acknowledgment unchanged. JobNotFoundError means
        the lease is gone and the caller must stop working on the job.
        """
        payload = RenewJobRequest(plan_id=coerce_uuid(plan_id, "plan_id"), job_id=coerce_uuid(job_id, "job_id"))
        status, raw = await self._post(request_uri, RENEW_JOB_PATH, payload, cancel_event=cancel_event)
        if _is_success(status):
            logger.debug(f"Renewed job {payload.job_id}")
            return self._decode_success(status, raw, what="renew job response")

        c = interpret_failure(status, _body_text(raw), RENEW_POLICY)
        messages = {ProtocolErrorKind.JOB_NOT_FOUND: f"Job not found: {payload.job_id}"}
        raise self._error(c, messages, failed="Failed to renew job")

    async def complete_job(
        self,
        request_uri: str,
        plan_id: uuid.UUID | str,
        job_id: uuid.UUID | str,
        conclusion: TaskResult | str,
        outputs: Optional[Mapping[str, Any]] = None,
        step_results: Optional[Sequence[Any]] = None,
        annotations: Optional[Sequence[Any]] = None,
        environment_url: str = "",
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        """Report the final result of a job. Terminal: do not renew the job afterwards."""
        payload = CompleteJobRequest(
            plan_id=coerce_uuid(plan_id, "plan_id"),
            job_id=coerce_uuid(job_id, "job_id"),
            conclusion=TaskResult(conclusion),
            outputs=dict(outputs or {}),
            step_results=list(step_results or []),
            annotations=list(annotations or []),
            environment_url=environment_url or "",
        )
        status, raw = await self._post(request_uri, COMPLETE_JOB_PATH, payload, cancel_event=cancel_event)
        if _is_success(status):
            logger.info(f"Completed job {payload.job_id} conclusion={payload.conclusion.value}")
            return

        c = interpret_failure(status, _body_text(raw), COMPLETE_POLICY)
        messages = {ProtocolErrorKind.JOB_NOT_FOUND: f"Job not found: {payload.job_id}"}
        raise self._error(c, messages, failed="Failed to complete job")

    def _decode_success(self, status: int, raw: bytes, *, what: str) -> Dict[str, Any]:
        try:
            return decode_object(raw)
        except (msgspec.DecodeError, ValueError) as exc:
            body = _body_text(raw) or None
            raise RunServiceTransportError(
                f"Invalid {what} (status {status}): {exc}", status=status, body=body
            ) from exc

    def _error(
        self,
        c: FailureClassification,
        messages: Mapping[ProtocolErrorKind, str],
        *,
        failed: str,
    ) -> LeaseProtocolError:
        message = messages.get(c.kind)
        if message is None or c.kind is ProtocolErrorKind.TRANSPORT:
            message = f"{failed}: HTTP {c.status}. {c.body}" if c.body else f"{failed}: HTTP {c.status}"
            err_type = RunServiceTransportError
        else:
            err_type = error_type_for(c.kind)
        logger.warning(f"{message} ({c.kind.value}, structured={c.structured})")
        return err_type(message, status=c.status, body=c.body, detail=c.detail)

    async def _post(
        self,
        request_uri: str,
        path: str,
        payload: msgspec.Struct,
        *,
        cancel_event: Optional[asyncio.Event],
    ) -> Tuple[int, bytes]:
        if not request_uri:
            raise ValueError("request_uri required")
        url = urljoin(request_uri, path)
        data = encode_request(payload)
        if cancel_event is None:
            return await self._send(url, data)

        if cancel_event.is_set():
            raise LeaseRequestCanceledError(f"Request to {path} canceled before it was sent")
        exchange = asyncio.ensure_future(self._send(url, data))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({exchange, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            exchange.cancel()
            raise
        finally:
            waiter.cancel()

        if exchange not in done:
            exchange.cancel()
            await asyncio.gather(exchange, return_exceptions=True)
            logger.info(f"Abandoned in-flight request to {url}")
            raise LeaseRequestCanceledError(f"Request to {path} canceled before a response arrived")
        return exchange.result()

    async def _send(self, url: str, data: bytes) -> Tuple[int, bytes]:
        logger.debug(f"POST {url}")
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        try:
            async with aiohttp.ClientSession(timeout=timeout, headers=self._headers()) as session:
                async with session.post(url, data=data) as resp:
                    raw = await resp.read()
                    return resp.status, raw
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RunServiceTransportError(f"Request to {url} failed: {exc!r}") from exc


__all__ = ["RunServiceClient"]
