"""Pydantic schemas for API validation and serialization."""

from app.models.schemas.decision import (
    BureauResult,
    CreditCheckRequest,
    CreditCheckResponse,
    DecisionReasoning,
    DecisionRequest,
    DecisionResult,
    RuleEvaluationRecord,
)
from app.models.schemas.rule import (
    InferredRuleCandidate,
    RuleCreate,
    RuleInferenceResponse,
    RuleListResponse,
    RuleResponse,
    RuleUpdate,
)

__all__ = [
    "BureauResult",
    "CreditCheckRequest",
    "CreditCheckResponse",
    "DecisionReasoning",
    "DecisionRequest",
    "DecisionResult",
    "RuleEvaluationRecord",
    "InferredRuleCandidate",
    "RuleCreate",
    "RuleInferenceResponse",
    "RuleListResponse",
    "RuleResponse",
    "RuleUpdate",
]
