from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from typing import Mapping, Optional

from .client import RunServiceClient

_RUNNER_OS_BY_SYSTEM = {
    "Linux": "Linux",
    "Windows": "Windows",
    "Darwin": "macOS",
}


def default_runner_os() -> str:
    system = platform.system()
    return _RUNNER_OS_BY_SYSTEM.get(system, system or "Linux")


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = str(env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class RunServiceSettings:
    """Connection settings for the run service, usually read from the environment."""

    url: str
    token: Optional[str] = None
    timeout_s: Optional[float] = None
    runner_os: str = ""
    heartbeat_interval_s: float = 60.0

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url is required")
        if self.heartbeat_interval_s <= 0:
            raise ValueError("heartbeat_interval_s must be > 0")
        if not self.runner_os:
            object.__setattr__(self, "runner_os", default_runner_os())

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "RunServiceSettings":
        env = os.environ if env is None else env
        url = str(env.get("RUN_SERVICE_URL") or "").strip()
        if not url:
            raise ValueError("RUN_SERVICE_URL not set")
        timeout_s = _float_env(env, "RUN_SERVICE_TIMEOUT_S", 0.0)
        return cls(
            url=url,
            token=str(env.get("RUN_SERVICE_TOKEN") or "").strip() or None,
            timeout_s=timeout_s if timeout_s > 0 else None,
            runner_os=str(env.get("RUNNER_OS") or "").strip(),
            heartbeat_interval_s=_float_env(env, "RUN_SERVICE_HEARTBEAT_INTERVAL_S", 60.0),
        )

    def create_client(self) -> RunServiceClient:
        return RunServiceClient(token=self.token, timeout_s=self.timeout_s)


__all__ = ["RunServiceSettings", "default_runner_os"]
