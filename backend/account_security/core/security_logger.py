# backend/account_security/core/security_logger.py
"""
Dedicated security logger for fail2ban integration.

Mirrors every security event into a line-oriented log that fail2ban can parse.
The database SecurityLog table stays the authoritative audit trail; this file
exists so host-level tooling can react to brute force without querying it.
"""

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

from account_security.core.config import settings


def sanitize(value: object | None, max_length: int = 255) -> str:
    """
    Sanitize user input to prevent log injection attacks.

    Removes characters that could break log parsing or inject fake entries
    (newlines, brackets, angle brackets and control characters), then
    truncates to ``max_length``.
    """
    if value is None or value == "":
        return "unknown"

    value = str(value).strip()
    value = re.sub(r"[\n\r\[\]<>\x00-\x1f\x7f-\x9f]", "", value)
    return value[:max_length] or "unknown"


def mask_email(email: str | None) -> str:
    """
    Mask an email for privacy while keeping it recognisable.

    Shows the first 3 chars of the local part plus the domain.
    """
    if not email or "@" not in email:
        return sanitize(email)

    local, domain = email.rsplit("@", 1)
    if len(local) > 3:
        masked_local = local[:3] + "***"
    else:
        masked_local = local[0] + "***" if local else "***"

    return f"{sanitize(masked_local)}@{sanitize(domain)}"


class SecurityLogger:
    """
    Security event logger for fail2ban.

    Log format compatible with fail2ban datepattern:
        2026-01-05 10:15:30 SECURITY [EVENT_TYPE] ip=x.x.x.x field=value ...

    All user-controlled fields are sanitized to prevent log injection. Without
    a log file the records propagate to the application's root logger.
    """

    def __init__(self, log_file: Path | None = None, name: str = "security"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        if log_file is not None and not self.logger.handlers:
            log_file.parent.mkdir(parents=True, exist_ok=True)

            # Rotating file handler: 50MB max, keep 10 backups
            handler = RotatingFileHandler(
                str(log_file),
                maxBytes=50 * 1024 * 1024,
                backupCount=10,
            )
            # The message carries EVENT_TYPE] ip=... fields...
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s SECURITY [%(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            self.logger.addHandler(handler)
            self.logger.propagate = False

    def event(
        self,
        event_type: str,
        severity: str,
        ip: str | None = None,
        user_id: object | None = None,
    ) -> None:
        """
        Mirror an audit trail event.

        Written under the EVENT tag; FAILED_LOGIN] lines come only from
        failed_login().
        """
        self.logger.info(
            f"EVENT] type={sanitize(event_type, max_length=50)} ip={sanitize(ip)} "
            f"user_id={sanitize(user_id)} severity={sanitize(severity, max_length=20)}"
        )

    def failed_login(self, ip: str | None, identifier: str | None, reason: str) -> None:
        """
        Log a rejected login.

        Args:
            ip: Client IP address
            identifier: Email that was attempted
            reason: BAD_CREDENTIALS, ACCOUNT_LOCKED, IP_BLOCKED
        """
        self.logger.info(
            f"FAILED_LOGIN] ip={sanitize(ip)} email={mask_email(identifier)} reason={sanitize(reason)}"
        )

    def successful_login(self, ip: str | None, user_id: object) -> None:
        """Log a successful login (for audit trail, not for banning)."""
        self.logger.info(f"LOGIN_SUCCESS] ip={sanitize(ip)} user_id={sanitize(user_id)}")


security_log = SecurityLogger(settings.SECURITY_LOG_FILE)
