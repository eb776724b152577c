"""Configuration models for the client and the watch loop."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from consul_events.errors import ConfigurationError

_WAIT_RE = re.compile(r"^(\d+(?:\.\d+)?)(ms|s|m|h)?$")
_WAIT_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_wait(wait: str) -> float:
    """Convert an agent wait duration ("1m", "30s", "500ms") to seconds."""
    m = _WAIT_RE.match(wait.strip())
    if m is None:
        raise ConfigurationError(f"invalid wait duration: {wait!r}")
    value, unit = m.groups()
    return float(value) * _WAIT_UNITS[unit or "s"]


@dataclass
class RetryConfig:
    """Backoff applied to hard fetch failures (timeouts retry immediately)."""

    initial_backoff: float = 1.0  # seconds
    max_backoff: float = 30.0  # seconds

    def delay(self, failures: int) -> float:
        """Backoff before the next attempt after `failures` consecutive failures."""
        if failures <= 0:
            return 0.0
        return min(self.max_backoff, self.initial_backoff * 2 ** (failures - 1))


@dataclass
class ClientConfig:
    """Complete client configuration."""

    # Agent
    address: str = "127.0.0.1:8500"
    scheme: str = "http"
    datacenter: str = ""
    token: str = ""  # ACL token, loaded from CONSUL_EVENTS_TOKEN

    # Watch
    wait: str = "1m"  # server-side blocking wait
    request_timeout: float = 59.0  # client-side, below the server wait
    retry: RetryConfig = field(default_factory=RetryConfig)
    max_pending: int = 1024  # undelivered events per watch

    log_level: str = "info"

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.address.rstrip('/')}"

    def validate(self) -> ClientConfig:
        if self.scheme not in ("http", "https"):
            raise ConfigurationError(f"unsupported scheme: {self.scheme!r}")
        if not self.address:
            raise ConfigurationError("agent address required")
        wait_seconds = parse_wait(self.wait)
        if not 0 < self.request_timeout < wait_seconds:
            raise ConfigurationError(
                f"request_timeout ({self.request_timeout}s) must be positive and "
                f"shorter than the server wait ({self.wait})"
            )
        if self.retry.initial_backoff < 0 or self.retry.max_backoff < self.retry.initial_backoff:
            raise ConfigurationError("invalid retry backoff bounds")
        if self.max_pending < 1:
            raise ConfigurationError(f"max_pending must be at least 1, got {self.max_pending}")
        return self
