"""Core enums for type safety across the application."""

from enum import Enum


class RuleType(str, Enum):
    """Input a decision rule is evaluated against."""

    CREDIT_SCORE = "CREDIT_SCORE"
    LOAN_AMOUNT = "LOAN_AMOUNT"
    BUREAU_RESPONSE = "BUREAU_RESPONSE"
    AGE_LIMIT = "AGE_LIMIT"


class Operator(str, Enum):
    """Comparison operators for rule thresholds."""

    GTE = ">="
    LTE = "<="
    GT = ">"
    LT = "<"
    EQ = "=="


class Importance(str, Enum):
    """Rule importance levels."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class RuleSource(str, Enum):
    """Provenance of a rule definition."""

    MANUAL = "MANUAL"
    MODEL = "MODEL"


class BureauName(str, Enum):
    """Credit bureaus queried during a credit check."""

    EXPERIAN = "EXPERIAN"
    EQUIFAX = "EQUIFAX"


class BureauStatus(str, Enum):
    """Outcome of a single bureau call."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"


class DecisionOutcome(str, Enum):
    """Final loan decision."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DecisionMode(str, Enum):
    """How the hybrid combinator reaches a decision."""

    RULES = "rules"
    LLM = "llm"
    HYBRID = "hybrid"


class LLMProviderName(str, Enum):
    """Supported LLM backends."""

    OPENAI = "openai"
    OLLAMA = "ollama"
