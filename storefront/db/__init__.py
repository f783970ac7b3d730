"""Database Infrastructure — SQLAlchemy declarative base.

Invariants:
    - All models inherit from db.base.Base
    - All sessions are async (AsyncSession)
"""
