"""SQLAlchemy ORM table models."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class GrantClusterModel(Base):
    """Grant cluster table, written by the clustering pipeline.

    ``vector`` holds the embedding as text (a JSON array, which is also
    pgvector's text form).
    """

    __tablename__ = "grant_clusters"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    grant_name: Mapped[str] = mapped_column(String(500), nullable=False)
    grant_amount: Mapped[str | None] = mapped_column(String(255), nullable=True)
    grant_date: Mapped[str | None] = mapped_column(String(255), nullable=True)
    grant_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    grant_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    grant_organisation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    grant_eligibility: Mapped[str | None] = mapped_column(Text, nullable=True)
    raw_grant_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    vector: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(UTC)
    )
