"""User ORM — account that authors posts.

Invariants:
    - id is an autoincrement integer primary key
    - email is unique at the database level (authoritative duplicate guard)
    - deleting a user deletes the user's posts (ORM cascade + ON DELETE CASCADE)

Design Decisions:
    - posts loaded with selectin: every user payload embeds its posts, and async
      sessions cannot lazy-load on attribute access
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from postboard.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    posts: Mapped[list["Post"]] = relationship(
        "Post", back_populates="author",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Post.id",
    )
