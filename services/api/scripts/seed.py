#!/usr/bin/env python3
"""Seed database with the initial administrator account.

Creates:
- One admin user (ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME / ADMIN_ADDRESS)

The script is idempotent: if the admin email already exists, nothing changes.

Usage:
    cd services/api
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402

load_dotenv()

from ratings_api.services.passwords import check_password_policy  # noqa: E402
from ratings_api.services.users import create_user, get_user_by_email  # noqa: E402
from ratings_api.settings import get_settings  # noqa: E402
from ratings_api.stores.postgres import close_db, create_tables, init_db  # noqa: E402


async def seed_admin() -> bool:
    """Create the admin account unless it exists. Returns True if created."""
    settings = get_settings()
    email = settings.admin_email.strip().lower()

    existing = await get_user_by_email(email)
    if existing:
        print(f"  ⏭️  Admin user already exists: {email}")
        return False

    check_password_policy(settings.admin_password)
    admin = await create_user(
        name=settings.admin_name,
        email=email,
        password=settings.admin_password,
        address=settings.admin_address,
        role="admin",
    )
    print(f"  ✅ Created admin user: {admin.email} (id={admin.id})")
    return True


async def seed_database() -> None:
    """Seed database with initial data."""
    settings = get_settings()

    await init_db()
    try:
        print("🌱 Seeding database...")
        if settings.auto_create_tables:
            await create_tables()

        print("\n👤 Creating admin user...")
        await seed_admin()

        print("\n✅ Database seeded successfully!")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(seed_database())
