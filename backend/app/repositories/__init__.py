from .base import BaseRepository
from .decision_repository import DecisionRepository
from .rule_repository import RuleRepository

__all__ = [
    "BaseRepository",
    "DecisionRepository",
    "RuleRepository",
]
