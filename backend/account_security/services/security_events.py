# backend/account_security/services/security_events.py
"""
Security event logging.

Provides:
- log_security_event(): append one SecurityLog row per call
- Severity to log-level mapping
- Metadata masking and size caps
"""

import json
import logging
import re
import uuid
from typing import Any, assert_never

from sqlalchemy.ext.asyncio import AsyncSession

from account_security import crud
from account_security.core.clock import Clock, system_clock
from account_security.core.request_info import normalize_ip_address
from account_security.core.security_logger import security_log
from account_security.db.models.security_log import (
    SecurityEventSeverity,
    SecurityEventType,
    SecurityLog,
)

logger = logging.getLogger(__name__)

# Maximum size for the metadata JSON (32KB)
MAX_METADATA_SIZE = 32 * 1024
MAX_USER_AGENT_LENGTH = 512

SENSITIVE_KEY_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r".*token.*",
        r".*secret.*",
        r".*password.*",
        r".*api_key.*",
        r".*session_id.*",
    )
]


def severity_log_level(severity: SecurityEventSeverity) -> int:
    """Python logging level used when echoing an event of this severity."""
    match severity:
        case SecurityEventSeverity.LOW | SecurityEventSeverity.MEDIUM:
            return logging.INFO
        case SecurityEventSeverity.HIGH:
            return logging.WARNING
        case SecurityEventSeverity.CRITICAL:
            return logging.CRITICAL
        case _:
            assert_never(severity)


def sanitize_metadata(metadata: dict[str, Any] | None) -> dict[str, Any]:
    """
    Make an event payload safe to store.

    Masks string values under keys that look like credentials and, if the
    serialized JSON exceeds MAX_METADATA_SIZE, drops the largest values until
    it fits and flags the payload with ``_truncated``. Values are coerced to
    JSON-compatible types (datetimes and UUIDs become strings).
    """
    if not metadata:
        return {}

    sanitized: dict[str, Any] = json.loads(json.dumps(metadata, default=str))

    for key, value in sanitized.items():
        if isinstance(value, str) and any(p.match(key) for p in SENSITIVE_KEY_PATTERNS):
            sanitized[key] = "[REDACTED]"

    if len(json.dumps(sanitized)) > MAX_METADATA_SIZE:
        sanitized["_truncated"] = True
        while len(json.dumps(sanitized)) > MAX_METADATA_SIZE:
            largest_key = max(
                (k for k in sanitized if k != "_truncated"),
                key=lambda k: len(json.dumps(sanitized[k])),
                default=None,
            )
            if largest_key is None:
                break
            del sanitized[largest_key]

    return sanitized


async def log_security_event(
    db: AsyncSession,
    event_type: SecurityEventType,
    severity: SecurityEventSeverity,
    description: str,
    *,
    user_id: uuid.UUID | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    metadata: dict[str, Any] | None = None,
    clock: Clock = system_clock,
    commit: bool = True,
) -> SecurityLog:
    """
    Append one event to the security audit trail.

    Storage errors are not caught: an event that cannot be written must fail
    the operation that produced it. With ``commit=False`` the row joins the
    caller's unit of work.
    """
    row = await crud.security_log.create(
        db,
        obj_in={
            "user_id": user_id,
            "event_type": event_type,
            "severity": severity,
            "description": description,
            "ip_address": normalize_ip_address(ip_address) if ip_address else None,
            "user_agent": user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None,
            "event_metadata": sanitize_metadata(metadata),
            "timestamp": clock.now(),
        },
    )
    if commit:
        await db.commit()

    logger.log(
        severity_log_level(severity),
        "Security event %s (%s): %s",
        event_type.value,
        severity.value,
        description,
    )
    security_log.event(event_type.value, severity.value, ip=ip_address, user_id=user_id)
    return row
