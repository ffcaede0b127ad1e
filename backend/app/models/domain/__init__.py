"""Domain models for the application."""

from app.models.domain.decision import Decision
from app.models.domain.rule import RuleConfiguration

__all__ = [
    "Decision",
    "RuleConfiguration",
]
