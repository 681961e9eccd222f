# backend/account_security/schemas/security.py
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from account_security.db.models.security_log import SecurityEventSeverity, SecurityEventType


class BlockedIPRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ip_address: str
    reason: str
    failed_attempts: int
    blocked_at: datetime
    expires_at: datetime | None = None
    blocked_by: str | None = None
    unblocked: bool
    unblocked_at: datetime | None = None
    unblocked_by: str | None = None


class SecurityLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: uuid.UUID | None = None
    event_type: SecurityEventType
    severity: SecurityEventSeverity
    description: str
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="event_metadata")
    timestamp: datetime


class SecurityStats(BaseModel):
    total_blocked_ips: int
    active_blocked_ips: int
    total_security_events: int
    recent_failed_logins: int = Field(description="FAILED_LOGIN events in the last 24 hours")
    locked_accounts: int
    recent_password_resets: int = Field(
        description="PASSWORD_RESET_REQUEST events in the last 7 days"
    )
    activity_level: Literal["low", "normal", "high"]


class PasswordResetRequest(BaseModel):
    email: EmailStr
