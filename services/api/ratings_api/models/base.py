"""Column defaults shared by all models."""

from datetime import datetime, timezone
from uuid import uuid4


def generate_id() -> str:
    """Generate unique primary key."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
