"""Data stores for persistence and session state.

Stores handle:
- PostgreSQL: DB engine, sessions, ORM base
- Redis: server-side session records with TTL

No business logic in stores - that belongs in services.
"""
