"""Persisted loan decision, one per request id."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import DecisionOutcome
from app.db.base import BaseModel


class Decision(BaseModel):
    """Stored decision. The unique request_id makes evaluation idempotent."""

    __tablename__ = "decisions"

    request_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    decision: Mapped[DecisionOutcome] = mapped_column(
        SQLEnum(DecisionOutcome, name="decision_outcome"), nullable=False
    )
    credit_score: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 2), nullable=True
    )
    loan_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(15, 2), nullable=True
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<Decision(request_id={self.request_id!r}, "
            f"decision={self.decision.value}, credit_score={self.credit_score})>"
        )
