"""LLM providers and decision adapter."""

from .decision_adapter import LLMDecision, LLMDecisionAdapter, parse_decision_response
from .providers import LLMProvider, OllamaProvider, OpenAIProvider, build_provider

__all__ = [
    "LLMDecision",
    "LLMDecisionAdapter",
    "LLMProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "build_provider",
    "parse_decision_response",
]
