from typing import Optional

from fastapi import Request

from utils.logger_factory import new_logger

IPV4_MAPPED_PREFIX = "::ffff:"

# Checked in order; the first header present wins
FORWARDING_HEADERS = [
    "x-vercel-forwarded-for",
    "X-Forwarded-For",
    "X-Real-IP",
]


def normalize_address(raw_address: Optional[str]) -> str:
    """
    Reduce a raw client address to the key visits are stored under.

    A forwarding chain such as "203.0.113.7, 10.0.0.1" keeps only its first
    hop, and an IPv4-mapped IPv6 address ("::ffff:203.0.113.7") is reduced
    to the bare IPv4 form.
    """
    if not raw_address:
        return ""
    address = raw_address.split(",")[0].strip()
    if address.lower().startswith(IPV4_MAPPED_PREFIX):
        address = address[len(IPV4_MAPPED_PREFIX):]
    return address


def client_address(request: Request) -> str:
    """Extract the normalized client IP from proxy headers or the socket peer."""
    log = new_logger("client_address")

    for header in FORWARDING_HEADERS:
        value = request.headers.get(header)
        if value:
            log.info(f"Using {header}: {value}")
            return normalize_address(value)

    fallback_ip = request.client.host if request.client else "unknown"
    log.info(f"Using fallback IP: {fallback_ip}")
    return normalize_address(fallback_ip)
