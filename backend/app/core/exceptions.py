"""Domain-specific exceptions."""


class CreditDecisionError(Exception):
    """Base exception for the decision engine."""

    pass


class BureauUnavailableError(CreditDecisionError):
    """A credit bureau could not be reached or returned an unusable answer."""

    pass


class LLMConfigurationError(CreditDecisionError):
    """LLM path invoked while disabled, misconfigured or unreachable."""

    pass


class DecisionEvaluationError(CreditDecisionError):
    """Decision could not be produced by the LLM provider."""

    pass


class LLMResponseParseError(DecisionEvaluationError):
    """LLM answered, but no decision could be read from the text."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class RuleValidationError(CreditDecisionError, ValueError):
    """Rule definition is invalid."""

    pass


class DuplicateRuleError(RuleValidationError):
    """Another rule already uses the requested name."""

    pass
