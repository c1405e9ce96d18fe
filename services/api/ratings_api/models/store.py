"""Store model.

A store is both the thing being rated and a login principal: store owners
sign in with the store's email + password and get the synthetic role "store".
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ratings_api.models.base import generate_id, utcnow
from ratings_api.stores.postgres import Base

if TYPE_CHECKING:
    from ratings_api.models.rating import Rating


class Store(Base):
    """Rated store with owner credentials."""

    __tablename__ = "stores"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    name: Mapped[str] = mapped_column(String(60), index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))  # bcrypt hash
    address: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    ratings: Mapped[list["Rating"]] = relationship(
        back_populates="store",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Store {self.name}>"
