"""ORM Models — SQLAlchemy declarative models for users and posts.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from postboard.models.user import User  # noqa: F401
from postboard.models.post import Post  # noqa: F401
