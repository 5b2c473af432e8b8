"""Catalog snapshot model.

One row per (version, source) holds a full normalized batch of artifacts.
The special source "all" is the materialized union of every provider row.
Large providers may be split into shard rows ("n8n.io#1", "n8n.io#2", ...)
which are gathered back by source prefix.
"""

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import DateTime, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from automation_matching.models.base import Base


class CatalogSnapshot(Base):
    """Versioned, source-scoped batch of catalog artifacts."""

    __tablename__ = "workflow_cache"
    __table_args__ = (
        UniqueConstraint("version", "source", name="uq_workflow_cache_version_source"),
    )

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)

    # ═══════════════════════════════════════════════════════════════════
    # IDENTITY
    # ═══════════════════════════════════════════════════════════════════
    version: Mapped[str] = mapped_column(String(20), nullable=False)
    source: Mapped[str] = mapped_column(String(100), nullable=False)

    # ═══════════════════════════════════════════════════════════════════
    # PAYLOAD
    # ═══════════════════════════════════════════════════════════════════
    workflows: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False, default=list)
    stats: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    # ═══════════════════════════════════════════════════════════════════
    # TIMESTAMPS
    # ═══════════════════════════════════════════════════════════════════
    last_fetch_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def workflow_count(self) -> int:
        return len(self.workflows or [])
