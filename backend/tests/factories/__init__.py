# backend/tests/factories/__init__.py

from .user_factory import UserFactory

__all__ = ["UserFactory"]
