"""Rating model.

One row per (user, store) pair; resubmitting updates the existing row.
The pair is enforced unique at the database level.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ratings_api.models.base import generate_id, utcnow
from ratings_api.stores.postgres import Base

if TYPE_CHECKING:
    from ratings_api.models.store import Store
    from ratings_api.models.user import User


class Rating(Base):
    """A user's 1-5 star rating of a store."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "store_id", name="uq_ratings_user_store"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_rating_range"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    # Relations
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id", ondelete="CASCADE"), index=True)

    rating: Mapped[int] = mapped_column()

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    user: Mapped["User"] = relationship(back_populates="ratings")
    store: Mapped["Store"] = relationship(back_populates="ratings")

    def __repr__(self) -> str:
        return f"<Rating {self.user_id}->{self.store_id} {self.rating}>"
