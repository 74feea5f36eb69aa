"""Data stores for persistence and caching.

Stores handle:
- PostgreSQL: DB session, transactions, ORM operations
- Redis: short-lived read caching

No marketplace rules in stores - those belong in services.
"""
