"""Persistence of catalog snapshots.

The cache needs exactly two operations: upsert one (version, source) row and
load every row belonging to a source key (the key itself plus its `key#n`
shards). `SqlSnapshotStore` does this against the `workflow_cache` table,
`InMemorySnapshotStore` keeps rows in a dict for tests and mock mode.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import or_, select
from sqlalchemy.dialects.postgresql import insert

from automation_matching.db import session_scope
from automation_matching.models.catalog import CatalogSnapshot

logger = logging.getLogger(__name__)


@dataclass
class SnapshotRecord:
    source: str
    workflows: list[dict[str, Any]] = field(default_factory=list)
    stats: dict[str, Any] | None = None
    last_fetch_time: datetime | None = None


class SnapshotStore(Protocol):
    def upsert(
        self,
        version: str,
        source: str,
        workflows: list[dict[str, Any]],
        stats: dict[str, Any] | None,
        fetched_at: datetime,
    ) -> None: ...

    def load(self, version: str, source_key: str) -> list[SnapshotRecord]: ...


def _belongs_to(row_source: str, source_key: str) -> bool:
    return row_source == source_key or row_source.startswith(f"{source_key}#")


class SqlSnapshotStore:
    """Snapshot store backed by the workflow_cache table."""

    def upsert(
        self,
        version: str,
        source: str,
        workflows: list[dict[str, Any]],
        stats: dict[str, Any] | None,
        fetched_at: datetime,
    ) -> None:
        stmt = insert(CatalogSnapshot).values(
            version=version,
            source=source,
            workflows=workflows,
            stats=stats,
            last_fetch_time=fetched_at,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_workflow_cache_version_source",
            set_={
                "workflows": stmt.excluded.workflows,
                "stats": stmt.excluded.stats,
                "last_fetch_time": stmt.excluded.last_fetch_time,
                "updated_at": stmt.excluded.last_fetch_time,
            },
        )
        with session_scope() as session:
            session.execute(stmt)
        logger.info("Upserted snapshot %s/%s with %d artifacts", version, source, len(workflows))

    def load(self, version: str, source_key: str) -> list[SnapshotRecord]:
        stmt = (
            select(CatalogSnapshot)
            .where(CatalogSnapshot.version == version)
            .where(
                or_(
                    CatalogSnapshot.source == source_key,
                    CatalogSnapshot.source.like(f"{source_key}#%"),
                )
            )
            .order_by(CatalogSnapshot.source)
        )
        with session_scope() as session:
            rows = session.execute(stmt).scalars().all()
            return [
                SnapshotRecord(
                    source=row.source,
                    workflows=list(row.workflows or []),
                    stats=row.stats,
                    last_fetch_time=row.last_fetch_time,
                )
                for row in rows
            ]


class InMemorySnapshotStore:
    """Dict-backed store with the same semantics as the SQL store."""

    def __init__(self) -> None:
        self._rows: dict[tuple[str, str], SnapshotRecord] = {}

    def upsert(
        self,
        version: str,
        source: str,
        workflows: list[dict[str, Any]],
        stats: dict[str, Any] | None,
        fetched_at: datetime,
    ) -> None:
        self._rows[(version, source)] = SnapshotRecord(
            source=source,
            workflows=list(workflows),
            stats=stats,
            last_fetch_time=fetched_at,
        )

    def load(self, version: str, source_key: str) -> list[SnapshotRecord]:
        return [
            record
            for (row_version, row_source), record in sorted(self._rows.items())
            if row_version == version and _belongs_to(row_source, source_key)
        ]
