"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from consul_events.errors import ConfigurationError
from consul_events.models.config import ClientConfig, RetryConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "CONSUL_EVENTS_",
) -> ClientConfig:
    """Load client configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (CONSUL_EVENTS_ADDRESS, etc.)
        2. TOML config file
        3. Defaults from ClientConfig

    Raises ConfigurationError for an unreadable file, a value of the wrong
    type, or an inconsistent result.
    """
    try:
        return _load(config_path, env_prefix).validate()
    except ConfigurationError:
        raise
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"invalid config file {config_path}: {exc}") from exc
    except (AttributeError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid configuration value: {exc}") from exc


def _load(config_path: str | Path | None, env_prefix: str) -> ClientConfig:
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClientConfig()

    # ── Agent section ──────────────────────────────────────
    agent = raw.get("agent", {})
    if v := agent.get("address"):
        cfg.address = str(v)
    if v := agent.get("scheme"):
        cfg.scheme = str(v)
    if v := agent.get("datacenter"):
        cfg.datacenter = str(v)
    if v := agent.get("token"):
        cfg.token = str(v)

    # ── Watch section ──────────────────────────────────────
    watch = raw.get("watch", {})
    if v := watch.get("wait"):
        cfg.wait = str(v)
    if v := watch.get("request_timeout"):
        cfg.request_timeout = float(v)
    cfg.retry = RetryConfig(
        initial_backoff=float(watch.get("initial_backoff", 1.0)),
        max_backoff=float(watch.get("max_backoff", 30.0)),
    )
    if (v := watch.get("max_pending")) is not None:
        cfg.max_pending = int(v)

    # ── Logging section ────────────────────────────────────
    logging_raw = raw.get("logging", {})
    if v := logging_raw.get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if addr := os.environ.get(f"{env_prefix}ADDRESS"):
        cfg.address = addr
    if scheme := os.environ.get(f"{env_prefix}SCHEME"):
        cfg.scheme = scheme
    if dc := os.environ.get(f"{env_prefix}DATACENTER"):
        cfg.datacenter = dc
    if token := os.environ.get(f"{env_prefix}TOKEN"):
        cfg.token = token
    if wait := os.environ.get(f"{env_prefix}WAIT"):
        cfg.wait = wait
    if timeout := os.environ.get(f"{env_prefix}REQUEST_TIMEOUT"):
        cfg.request_timeout = float(timeout)

    return cfg
