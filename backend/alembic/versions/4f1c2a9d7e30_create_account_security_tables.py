"""create account security tables

Revision ID: 4f1c2a9d7e30
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f1c2a9d7e30"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

EVENT_TYPES = (
    "IP_BLOCKED",
    "IP_UNBLOCKED",
    "FAILED_LOGIN",
    "ACCOUNT_LOCKED",
    "ACCOUNT_UNLOCKED",
    "SUCCESSFUL_LOGIN",
    "PASSWORD_RESET_REQUEST",
    "PASSWORD_RESET_COMPLETE",
    "SUSPICIOUS_ACTIVITY",
)
SEVERITIES = ("LOW", "MEDIUM", "HIGH", "CRITICAL")


def upgrade() -> None:
    """Create users, blocked IPs, security logs and password reset tables."""
    op.create_table(
        "users",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("hashed_password", sa.String(length=1024), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_superuser", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("account_locked", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("account_locked_reason", sa.String(length=255), nullable=True),
        sa.Column("account_locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("login_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("password_changed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_users_email"), ["email"], unique=True)

    op.create_table(
        "blocked_ips",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("failed_attempts", sa.Integer(), nullable=False),
        sa.Column("blocked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("blocked_by", sa.String(length=255), nullable=True),
        sa.Column("unblocked", sa.Boolean(), nullable=False),
        sa.Column("unblocked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("unblocked_by", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_blocked_ips")),
    )
    with op.batch_alter_table("blocked_ips", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_blocked_ips_ip_address"), ["ip_address"], unique=False)
        batch_op.create_index(
            "ix_blocked_ips_ip_unblocked", ["ip_address", "unblocked"], unique=False
        )

    op.create_table(
        "security_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", GUID(), nullable=True),
        sa.Column(
            "event_type",
            sa.Enum(*EVENT_TYPES, name="security_event_type_enum"),
            nullable=False,
        ),
        sa.Column(
            "severity",
            sa.Enum(*SEVERITIES, name="security_event_severity_enum"),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        sa.Column(
            "metadata",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_security_logs_user_id_users"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_security_logs")),
    )
    with op.batch_alter_table("security_logs", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_security_logs_user_id"), ["user_id"], unique=False)
        batch_op.create_index(
            batch_op.f("ix_security_logs_event_type"), ["event_type"], unique=False
        )
        batch_op.create_index(
            batch_op.f("ix_security_logs_ip_address"), ["ip_address"], unique=False
        )
        batch_op.create_index(batch_op.f("ix_security_logs_timestamp"), ["timestamp"], unique=False)
        batch_op.create_index(
            "ix_security_logs_type_ts", ["event_type", "timestamp"], unique=False
        )

    op.create_table(
        "password_reset_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", GUID(), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=False),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("successful", sa.Boolean(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_password_reset_logs_user_id_users"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_password_reset_logs")),
        sa.UniqueConstraint("token", name=op.f("uq_password_reset_logs_token")),
    )
    with op.batch_alter_table("password_reset_logs", schema=None) as batch_op:
        batch_op.create_index(
            batch_op.f("ix_password_reset_logs_user_id"), ["user_id"], unique=False
        )

    op.create_table(
        "verification_tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("identifier", sa.String(length=255), nullable=False),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("expires", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_verification_tokens")),
        sa.UniqueConstraint("token", name=op.f("uq_verification_tokens_token")),
    )
    with op.batch_alter_table("verification_tokens", schema=None) as batch_op:
        batch_op.create_index(
            batch_op.f("ix_verification_tokens_identifier"), ["identifier"], unique=False
        )


def downgrade() -> None:
    """Drop the account security tables."""
    with op.batch_alter_table("verification_tokens", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_verification_tokens_identifier"))
    op.drop_table("verification_tokens")

    with op.batch_alter_table("password_reset_logs", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_password_reset_logs_user_id"))
    op.drop_table("password_reset_logs")

    with op.batch_alter_table("security_logs", schema=None) as batch_op:
        batch_op.drop_index("ix_security_logs_type_ts")
        batch_op.drop_index(batch_op.f("ix_security_logs_timestamp"))
        batch_op.drop_index(batch_op.f("ix_security_logs_ip_address"))
        batch_op.drop_index(batch_op.f("ix_security_logs_event_type"))
        batch_op.drop_index(batch_op.f("ix_security_logs_user_id"))
    op.drop_table("security_logs")

    with op.batch_alter_table("blocked_ips", schema=None) as batch_op:
        batch_op.drop_index("ix_blocked_ips_ip_unblocked")
        batch_op.drop_index(batch_op.f("ix_blocked_ips_ip_address"))
    op.drop_table("blocked_ips")

    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_users_email"))
    op.drop_table("users")

    sa.Enum(name="security_event_severity_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="security_event_type_enum").drop(op.get_bind(), checkfirst=True)
