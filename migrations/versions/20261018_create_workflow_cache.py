"""Create workflow_cache and llm_costs tables.

Revision ID: 20261018_workflow_cache
Revises:
Create Date: 2026-10-18

workflow_cache holds one normalized catalog batch per (version, source);
llm_costs one row per OpenRouter call.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "20261018_workflow_cache"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "workflow_cache",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("version", sa.String(20), nullable=False),
        sa.Column("source", sa.String(100), nullable=False),
        sa.Column(
            "workflows",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("stats", postgresql.JSONB(), nullable=True),
        sa.Column("last_fetch_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("version", "source", name="uq_workflow_cache_version_source"),
    )
    # Prefix lookups gather shard rows ("n8n.io#1", ...) for a source key
    op.create_index(
        "idx_workflow_cache_source_prefix",
        "workflow_cache",
        ["version", "source"],
        postgresql_ops={"source": "varchar_pattern_ops"},
    )

    op.create_table(
        "llm_costs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("run_id", sa.String(100), nullable=False),
        sa.Column("asset_key", sa.String(100), nullable=False),
        sa.Column("operation", sa.String(50), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("input_tokens", sa.Integer(), nullable=False),
        sa.Column("output_tokens", sa.Integer(), nullable=False),
        sa.Column("cost_usd", sa.Numeric(10, 6), nullable=False),
        sa.Column("code_version", sa.String(50), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_llm_costs_run_id", "llm_costs", ["run_id"])
    op.create_index("idx_llm_costs_operation", "llm_costs", ["operation"])


def downgrade() -> None:
    op.drop_index("idx_llm_costs_operation", table_name="llm_costs")
    op.drop_index("idx_llm_costs_run_id", table_name="llm_costs")
    op.drop_table("llm_costs")
    op.drop_index("idx_workflow_cache_source_prefix", table_name="workflow_cache")
    op.drop_table("workflow_cache")
