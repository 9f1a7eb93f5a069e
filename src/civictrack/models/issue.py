# src/civictrack/models/issue.py
"""SQLAlchemy model for reported civic issues."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from civictrack.db.session import Base


class Issue(Base):
    """A citizen-reported problem at a geographic location.

    Issues are never deleted; hiding (automatic at the flag threshold or by an
    administrator) removes them from public listings.
    """

    __tablename__ = "issues"
    __table_args__ = (
        Index("ix_issues_category_status", "category", "status"),
        Index("ix_issues_reporter_id", "reporter_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="reported")
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Opaque user reference; anonymous reports leave it empty.
    reporter_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    flag_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
