"""Pydantic schemas for credit checks, decisions and reasoning."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import BureauStatus, DecisionOutcome, Importance, Operator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ==================== Bureau Schemas ====================


class BureauResult(BaseModel):
    """Outcome of one bureau call. Immutable once created."""

    bureau_name: str
    credit_score: Optional[Decimal] = None
    status: BureauStatus
    error_message: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)


# ==================== Request Schemas ====================


class CreditCheckRequest(BaseModel):
    """Applicant and loan data submitted for a credit check."""

    ssn: str = Field(..., min_length=4, max_length=11)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    loan_amount: Decimal = Field(..., gt=0)
    loan_purpose: Optional[str] = None
    annual_income: Optional[Decimal] = Field(None, ge=0)
    total_debt: Optional[Decimal] = Field(None, ge=0)
    monthly_cashflow: Optional[Decimal] = None
    applicant_age: Optional[int] = Field(None, ge=0, le=150)


class DecisionRequest(BaseModel):
    """Input to the decision engine: loan data plus bureau results."""

    request_id: str = Field(..., min_length=1, max_length=64)
    loan_amount: Decimal
    bureau_responses: list[BureauResult] = Field(default_factory=list)
    annual_income: Optional[Decimal] = None
    total_debt: Optional[Decimal] = None
    monthly_cashflow: Optional[Decimal] = None
    applicant_age: Optional[Decimal] = None


# ==================== Reasoning Schemas ====================


class RuleEvaluationRecord(BaseModel):
    """Outcome of one rule within a reasoning run."""

    rule_name: str
    description: Optional[str] = None
    passed: bool
    actual_value: str
    threshold: str
    operator: Operator
    explanation: str
    importance: Importance


class BureauInput(BaseModel):
    """Bureau data as seen by the reasoning generator."""

    bureau_name: str
    credit_score: Optional[Decimal] = None
    status: BureauStatus


class DecisionInputs(BaseModel):
    """Snapshot of the request data used for reasoning."""

    loan_amount: Optional[Decimal] = None
    bureau_response_count: int = 0
    applicant_age: Optional[Decimal] = None
    bureau_inputs: list[BureauInput] = Field(default_factory=list)


class CalculatedValues(BaseModel):
    """Values derived from the bureau results."""

    average_credit_score: Optional[Decimal] = None
    valid_bureau_count: int = 0
    credit_score_range: Optional[str] = None


class DecisionReasoning(BaseModel):
    """Human-readable explanation of how a decision was reached."""

    summary: str
    rule_evaluations: list[RuleEvaluationRecord] = Field(default_factory=list)
    inputs: Optional[DecisionInputs] = None
    calculated: Optional[CalculatedValues] = None
    decision_path: str = ""


# ==================== Response Schemas ====================


class DecisionResult(BaseModel):
    """Decision returned by the engine."""

    request_id: str
    decision: DecisionOutcome
    credit_score: Optional[Decimal] = None
    loan_amount: Optional[Decimal] = None
    reason: Optional[str] = None
    timestamp: datetime
    reasoning: Optional[DecisionReasoning] = None


class CreditCheckResponse(BaseModel):
    """End-to-end credit check outcome."""

    request_id: str
    status: DecisionOutcome
    credit_score: Optional[Decimal] = None
    loan_amount: Decimal
    decision_reason: Optional[str] = None
    timestamp: datetime
    experian_response: Optional[BureauResult] = None
    equifax_response: Optional[BureauResult] = None
    reasoning: Optional[DecisionReasoning] = None


class LLMStatusResponse(BaseModel):
    """LLM provider status."""

    enabled: bool
    provider: str
    model: str
    available: bool
    decision_mode: str


class LLMConnectionTestResponse(BaseModel):
    """Outcome of an LLM connection test."""

    success: bool
    message: str
    provider: Optional[str] = None
    model: Optional[str] = None


class LLMModelsResponse(BaseModel):
    """Models installed on a local Ollama server."""

    provider: str
    models: list[str]
