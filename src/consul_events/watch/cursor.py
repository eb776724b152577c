"""Blocking-query index handling."""

from __future__ import annotations

from consul_events.errors import MalformedResponseError


def normalize_index(raw: str | None) -> str:
    """Turn an X-Consul-Index header value into the cursor for the next query.

    Older agents could join two indexes into one header ("4, 10"). The second
    value is the one to carry forward, so compound values are always split.
    """
    if raw is None:
        raise MalformedResponseError("response has no X-Consul-Index header")
    value = raw.strip()
    if "," in value:
        parts = value.split(",")
        value = parts[1].strip()
    if not value:
        raise MalformedResponseError(f"empty index in header {raw!r}")
    return value
