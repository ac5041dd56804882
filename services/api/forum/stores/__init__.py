"""Data stores for persistence.

Stores handle:
- PostgreSQL / SQLite: engine, DB session, schema creation
- Redis: client lifecycle, key layout, id counters

No business logic in stores - that belongs in services.
"""
