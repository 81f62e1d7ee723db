"""Building public short link URLs."""

from typing import Mapping, Optional


def build_base_url(
    headers: Mapping[str, str],
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
    fallback: str = "",
) -> str:
    """Base URL a visitor would use to reach this service.

    X-Forwarded-Proto/X-Forwarded-Host win when both are set (reverse proxy),
    then the request's own scheme and Host header, then fallback.
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    proto = lowered.get("x-forwarded-proto")
    host = lowered.get("x-forwarded-host")

    if proto and host:
        return f"{proto}://{host}"
    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"
    return fallback.rstrip("/")


def build_short_url(short_id: str, base_url: str) -> str:
    """Absolute URL of a short link."""
    return f"{base_url.rstrip('/')}/{short_id}"
