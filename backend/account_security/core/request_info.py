# backend/account_security/core/request_info.py
"""
Helpers for pulling client metadata out of request headers.

Accepts any mapping of headers: Starlette's case-insensitive ``Headers`` or
a plain dict (matched case-insensitively).
"""

from collections.abc import Mapping

UNKNOWN_IP = "unknown"
UNKNOWN_USER_AGENT = "Unknown"
# Width of the ip_address columns (IPv6 text form).
MAX_IP_ADDRESS_LENGTH = 45


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def normalize_ip_address(value: str) -> str:
    """Strip and clip a client-supplied address to the stored column width."""
    return value.strip()[:MAX_IP_ADDRESS_LENGTH]


def get_client_ip(headers: Mapping[str, str]) -> str:
    """
    Resolve the originating client IP.

    Order: first hop of X-Forwarded-For, then X-Real-IP. Without either
    the address is reported as "unknown".
    """
    forwarded_for = _header(headers, "x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return normalize_ip_address(first_hop)

    real_ip = _header(headers, "x-real-ip")
    if real_ip and real_ip.strip():
        return normalize_ip_address(real_ip)

    return UNKNOWN_IP


def get_user_agent(headers: Mapping[str, str]) -> str:
    return _header(headers, "user-agent") or UNKNOWN_USER_AGENT
