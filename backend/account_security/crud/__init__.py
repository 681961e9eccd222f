# backend/account_security/crud/__init__.py
"""
Record store access for the account security core.
This module re-exports the CRUD objects from the underlying modules.
"""

from .crud_blocked_ip import blocked_ip
from .crud_password_reset import password_reset_log, verification_token
from .crud_security_log import security_log
from .crud_user import user

__all__ = ["blocked_ip", "password_reset_log", "security_log", "user", "verification_token"]
