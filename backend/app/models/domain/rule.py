"""Decision rule domain model."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Enum as SQLEnum,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import Importance, Operator, RuleSource, RuleType
from app.db.base import BaseModel


class RuleConfiguration(BaseModel):
    """Threshold rule evaluated by the decision engine, ordered by priority."""

    __tablename__ = "rule_configurations"

    rule_name: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True
    )
    rule_type: Mapped[RuleType] = mapped_column(
        SQLEnum(RuleType, name="rule_type"), nullable=False
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    threshold_value: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    operator: Mapped[Operator] = mapped_column(
        SQLEnum(Operator, name="rule_operator"), nullable=False
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )
    priority: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    importance: Mapped[Importance] = mapped_column(
        SQLEnum(Importance, name="rule_importance"),
        default=Importance.CRITICAL,
        nullable=False,
    )
    failure_message: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Provenance
    source: Mapped[RuleSource] = mapped_column(
        SQLEnum(RuleSource, name="rule_source"),
        default=RuleSource.MANUAL,
        nullable=False,
    )
    confidence_score: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    model_version: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # "metadata" is reserved on declarative classes
    rule_metadata: Mapped[Optional[dict]] = mapped_column(
        "metadata", JSON, nullable=True
    )
    updated_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<RuleConfiguration(id={self.id}, name={self.rule_name!r}, "
            f"type={self.rule_type.value}, enabled={self.enabled})>"
        )
