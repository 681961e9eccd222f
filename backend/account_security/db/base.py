# backend/account_security/db/base.py

# Importing every model registers it on Base.metadata; Alembic's env.py and
# the test fixtures import Base from here to see the full schema.
from account_security.db.base_class import Base  # noqa: F401
from account_security.db.models.blocked_ip import BlockedIP  # noqa: F401
from account_security.db.models.password_reset import (  # noqa: F401
    PasswordResetLog,
    VerificationToken,
)
from account_security.db.models.security_log import SecurityLog  # noqa: F401
from account_security.db.models.user import User  # noqa: F401
