"""
Account security core: IP blocking, failed login tracking, account locks,
password reset tokens and the security event trail.

Every operation takes an ``AsyncSession`` as its first argument and accepts
a ``clock`` keyword for deterministic time.
"""

from account_security.services.account_lockout import (
    LockStatus,
    get_lock_status,
    is_account_locked,
    lock_user_account,
    unlock_user_account,
)
from account_security.services.authentication import authenticate
from account_security.services.ip_guard import (
    block_ip,
    is_ip_blocked,
    list_blocked_ips,
    unblock_ip,
)
from account_security.services.login_tracker import (
    FailedLoginResult,
    reset_failed_attempts,
    track_failed_login,
)
from account_security.services.password_reset import (
    complete_password_reset,
    create_password_reset_token,
    request_password_reset,
    verify_password_reset_token,
)
from account_security.services.security_events import log_security_event
from account_security.services.security_stats import get_security_stats, list_security_logs

__version__ = "0.1.0"

__all__ = [
    "FailedLoginResult",
    "LockStatus",
    "authenticate",
    "block_ip",
    "complete_password_reset",
    "create_password_reset_token",
    "get_lock_status",
    "get_security_stats",
    "is_account_locked",
    "is_ip_blocked",
    "list_blocked_ips",
    "list_security_logs",
    "lock_user_account",
    "log_security_event",
    "request_password_reset",
    "reset_failed_attempts",
    "track_failed_login",
    "unblock_ip",
    "unlock_user_account",
    "verify_password_reset_token",
]
