"""
User Database Model

SQLAlchemy ORM model for the fields of the user account that the
crisis pipeline reads and writes. Authentication columns belong to
the account service and are not mapped here.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, Float, String, func
from sqlalchemy.orm import Mapped, mapped_column

from havyn.infrastructure.database.connection import Base


class UserModel(Base):
    """
    User table ORM model.

    Guardian, helpline and location fields are all nullable and
    best-effort.

    Table: users
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid4()),
        doc="Opaque user identifier"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        doc="User's own email address"
    )
    name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Display name"
    )

    # Emergency contacts
    guardian_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Guardian contact address"
    )
    helpline_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Secondary helpline override"
    )

    # Cached location
    last_known_lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    last_known_lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    last_location_update: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="When the cached location was last written"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
        doc="Account creation timestamp"
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email='{self.email[:3]}***')>"
