"""Database ORM models."""

from havyn.infrastructure.database.models.user_model import UserModel

__all__ = ["UserModel"]
