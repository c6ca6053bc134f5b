"""
Exceptions raised at the evaluator's request boundary.

The scoring core never raises these; they belong to the service, provider,
CLI and HTTP layers.
"""

from typing import Optional


class EvaluatorError(Exception):
    """Base exception for the architecture evaluator."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidRequest(EvaluatorError):
    """Neither a description nor a structured record was supplied, or the
    simulation parameters are outside their domain."""
    pass


class MalformedInput(EvaluatorError):
    """Decomposition output could not be parsed as an architecture record."""
    pass


class UpstreamUnavailable(EvaluatorError):
    """A language-model provider failed, timed out or is not configured."""
    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)
