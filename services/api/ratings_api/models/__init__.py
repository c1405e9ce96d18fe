"""SQLAlchemy ORM models.

Models represent database tables:
- users: Normal users and administrators
- stores: Rated stores; each store is also a login principal (store owner)
- ratings: One 1-5 star rating per (user, store) pair
"""

from ratings_api.models.rating import Rating
from ratings_api.models.store import Store
from ratings_api.models.user import User

__all__ = ["Rating", "Store", "User"]
