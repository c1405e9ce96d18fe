"""User model.

Represents a person who logs in with email + password.
Role is either "admin" or "user"; store owners live in the stores table.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ratings_api.models.base import generate_id, utcnow
from ratings_api.stores.postgres import Base

if TYPE_CHECKING:
    from ratings_api.models.rating import Rating


class User(Base):
    """Admin or normal user account."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    name: Mapped[str] = mapped_column(String(60))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))  # bcrypt hash
    address: Mapped[str] = mapped_column(Text)
    role: Mapped[str] = mapped_column(String(20), default="user", server_default="user")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    ratings: Mapped[list["Rating"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
