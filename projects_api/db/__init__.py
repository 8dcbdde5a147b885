"""Database Package — SQLAlchemy declarative base.

Invariants:
    - All ORM models share one metadata (db/base.py)

Design Decisions:
    - asyncpg driver for PostgreSQL (native async, no thread pool overhead)
"""
