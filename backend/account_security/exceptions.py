class AccountSecurityError(Exception):
    """Base exception for the account security core."""

    pass


class UserNotFoundError(AccountSecurityError):
    """Raised when a write operation targets an account that does not exist."""

    def __init__(self, user_id: object):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class AuthenticationError(AccountSecurityError):
    """Base for rejections surfaced to the person trying to sign in."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Wrong identifier or password. Identical whether or not the account exists."""

    def __init__(self, attempts_remaining: int):
        self.attempts_remaining = attempts_remaining
        super().__init__("Invalid email or password.")


class AccountLockedError(AuthenticationError):
    """The target account is locked, manually or by automatic lockout."""

    pass


class IPBlockedError(AuthenticationError):
    """The client IP address is blocked."""

    pass


class InvalidEmailError(AccountSecurityError):
    """A forgot-password request carried a malformed email address."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Invalid email format.")
