"""LLM cost tracking model."""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from automation_matching.models.base import Base


class LLMCost(Base):
    """One row per OpenRouter call made by step extraction or job analysis.

    Lets us compare prompt versions and see which asset spends the budget.
    """

    __tablename__ = "llm_costs"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)

    # Dagster context
    run_id: Mapped[str] = mapped_column(String(100), nullable=False)
    asset_key: Mapped[str] = mapped_column(String(100), nullable=False)

    operation: Mapped[str] = mapped_column(String(50), nullable=False)  # 'extract_steps', 'analyze_job'

    model: Mapped[str] = mapped_column(String(100), nullable=False)
    input_tokens: Mapped[int] = mapped_column(Integer, nullable=False)
    output_tokens: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_usd: Mapped[Decimal] = mapped_column(Numeric(10, 6), nullable=False)

    # Prompt version of the operation module
    code_version: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens
