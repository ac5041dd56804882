"""Persistence backends behind the ForumRepository contract.

- sql: async SQLAlchemy session (PostgreSQL in production, SQLite locally)
- kv: Redis documents and id-set indexes

Services only see ForumRepository; forum.repositories.factory picks the
backend from settings.
"""
