"""Pydantic schemas for decision rules."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import Importance, Operator, RuleSource, RuleType


class RuleBase(BaseModel):
    """Base schema for a rule with common fields."""

    rule_name: str = Field(..., min_length=1, max_length=100)
    rule_type: RuleType
    description: Optional[str] = None
    threshold_value: Decimal
    operator: Operator
    enabled: bool = True
    priority: int = Field(default=1, ge=0)
    importance: Importance = Importance.CRITICAL
    failure_message: Optional[str] = Field(None, max_length=500)


class RuleCreate(RuleBase):
    """Schema for creating a rule."""

    updated_by: Optional[str] = Field(None, max_length=100)


class RuleUpdate(BaseModel):
    """Schema for updating a rule (all fields optional)."""

    rule_name: Optional[str] = Field(None, min_length=1, max_length=100)
    rule_type: Optional[RuleType] = None
    description: Optional[str] = None
    threshold_value: Optional[Decimal] = None
    operator: Optional[Operator] = None
    enabled: Optional[bool] = None
    priority: Optional[int] = Field(None, ge=0)
    importance: Optional[Importance] = None
    failure_message: Optional[str] = Field(None, max_length=500)
    updated_by: Optional[str] = Field(None, max_length=100)


class RuleResponse(RuleBase):
    """Schema for rule response."""

    id: UUID
    source: RuleSource
    confidence_score: Optional[Decimal] = None
    model_version: Optional[str] = None
    rule_metadata: Optional[dict[str, Any]] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RuleListResponse(BaseModel):
    """Paginated list of rules."""

    items: list[RuleResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class InferredRuleCandidate(BaseModel):
    """
    Rule proposed by the model during inference.

    Field names follow the JSON shape requested in the inference prompt.
    """

    rule_name: str = Field(..., alias="ruleName", min_length=1, max_length=100)
    rule_type: RuleType = Field(..., alias="ruleType")
    description: Optional[str] = None
    operator: Operator
    threshold_value: Decimal = Field(..., alias="thresholdValue")
    failure_message: Optional[str] = Field(None, alias="failureMessage", max_length=500)
    priority: int = Field(default=1, ge=0)
    importance: Importance = Importance.CRITICAL
    confidence: Optional[Decimal] = Field(None, ge=0, le=1)

    model_config = ConfigDict(populate_by_name=True)


class RuleInferenceResponse(BaseModel):
    """Outcome of a rule inference run."""

    persisted: list[RuleResponse] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    message: str
    raw_model_response: Optional[str] = None
