"""Database repositories."""

from havyn.infrastructure.database.repositories.user_repository import UserRepository

__all__ = [
    "UserRepository",
]
