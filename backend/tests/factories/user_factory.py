# backend/tests/factories/user_factory.py

import uuid
from typing import Any

import factory
from sqlalchemy.ext.asyncio import AsyncSession

from account_security.core.security import password_helper
from account_security.db.models.user import User

DEFAULT_PASSWORD = "password123"
# Hashing is deliberately slow; hash the default password once per run.
_DEFAULT_PASSWORD_HASH = password_helper.hash(DEFAULT_PASSWORD)


def _hash_for(password: str) -> str:
    if password == DEFAULT_PASSWORD:
        return _DEFAULT_PASSWORD_HASH
    return password_helper.hash(password)


class UserFactory(factory.Factory):
    """
    Factory for User model instances.

    Instances are built, never saved by factory-boy itself: ``create_user``
    adds the user to an explicit session and leaves flushing/committing to
    the calling test or fixture.
    """

    class Meta:
        model = User
        # Raw password only feeds hashed_password; User does not accept it
        exclude = ("password",)

    id: uuid.UUID = factory.LazyFunction(uuid.uuid4)
    email: str = factory.Sequence(lambda n: f"testuser{n}@example.com")
    password: str = DEFAULT_PASSWORD
    hashed_password: str = factory.LazyAttribute(lambda o: _hash_for(o.password))
    is_active: bool = True
    is_superuser: bool = False
    is_verified: bool = True
    failed_login_attempts: int = 0
    account_locked: bool = False
    login_count: int = 0

    @classmethod
    def _create(
        cls: type["UserFactory"], model_class: type[User], *args: Any, **kwargs: Any
    ) -> User:
        raise NotImplementedError("Use create_user with a session.")

    @classmethod
    def create_user(cls: type["UserFactory"], session: AsyncSession, **kwargs: Any) -> User:
        """
        Builds a User instance and adds it to the provided session.
        Does NOT commit or flush the session.
        """
        user = cls.build(**kwargs)
        session.add(user)
        return user
