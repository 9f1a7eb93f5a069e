# src/civictrack/models/comment.py
"""SQLAlchemy model for comments on issues."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from civictrack.db.session import Base


class Comment(Base):
    """Comment on an issue, optionally replying to a top-level comment."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Replies point at a top-level comment; threads are one level deep.
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("comments.id"),
        nullable=True,
    )
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    flag_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
