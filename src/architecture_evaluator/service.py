"""
Analysis Service - request-level orchestration.

Resolves a request to an architecture record (structured input is used
directly, free text is decomposed by a language model), evaluates it, and
attaches a narrative explanation for description-based requests. The CLI and
the HTTP server are both thin layers over this class.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .app_logging import get_logger
from .config import EvaluatorConfig
from .decomposer import ArchitectureDecomposer
from .engine import EvaluationEngine
from .errors import InvalidRequest
from .explainer import NarrativeExplainer
from .normalizer import RecordNormalizer
from .providers import BedrockProvider, ChatCompletionsProvider, ProviderChain
from .schema import EvaluationResult, SimulationParameters

logger = get_logger("service")


class AnalysisRequest(BaseModel):
    """One analysis request.

    architecture_summary takes precedence over description. It is kept as
    raw data so the normalizer, not request validation, decides how to
    handle odd values.
    """
    model_config = ConfigDict(frozen=True)

    description: Optional[str] = None
    architecture_summary: Optional[Any] = None
    simulation: Optional[SimulationParameters] = None

    @property
    def has_description(self) -> bool:
        return bool(self.description and self.description.strip())


class AnalysisResponse(EvaluationResult):
    """Evaluation result plus language-model attribution."""
    ai_explanation: str = ""
    ai_provider: Optional[str] = None


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "request"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "Invalid request: " + "; ".join(parts)


def parse_request(payload: Any) -> AnalysisRequest:
    """Validate a raw JSON payload into an AnalysisRequest.

    Raises:
        InvalidRequest: If the payload is not an object or a field is out of range
    """
    if not isinstance(payload, dict):
        raise InvalidRequest("Request body must be a JSON object")
    try:
        return AnalysisRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequest(_format_validation_error(e)) from e


class AnalysisService:
    """Runs analysis requests end to end."""

    def __init__(
        self,
        engine: Optional[EvaluationEngine] = None,
        decomposer: Optional[ArchitectureDecomposer] = None,
        explainer: Optional[NarrativeExplainer] = None,
        normalizer: Optional[RecordNormalizer] = None,
        explain: bool = True,
    ):
        """
        Initialize the service.

        Args:
            engine: Evaluation engine (default weights if omitted)
            decomposer: Decomposer for description requests; without one,
                description requests fail with UpstreamUnavailable
            explainer: Explainer for description requests
            normalizer: Normalizer for structured records
            explain: Whether to request explanations at all
        """
        self.engine = engine or EvaluationEngine()
        self.normalizer = normalizer or RecordNormalizer()
        self.decomposer = decomposer or ArchitectureDecomposer(
            ProviderChain([]), self.normalizer
        )
        self.explainer = explainer
        self.explain = explain

    @classmethod
    def from_config(cls, config: EvaluatorConfig) -> "AnalysisService":
        """Build a service with providers wired from configuration."""
        chain = ProviderChain([
            BedrockProvider(config.bedrock),
            ChatCompletionsProvider(config.chat_completions),
        ])
        normalizer = RecordNormalizer()
        return cls(
            engine=EvaluationEngine(config.category_weights.to_weights()),
            decomposer=ArchitectureDecomposer(
                chain,
                normalizer,
                heuristic_fallback=config.decomposition.heuristic_fallback,
            ),
            explainer=NarrativeExplainer(chain, config.explanation.placeholder),
            normalizer=normalizer,
            explain=config.explanation.enabled,
        )

    def analyze(self, request: AnalysisRequest) -> AnalysisResponse:
        """Analyze one request.

        Args:
            request: Validated analysis request

        Returns:
            AnalysisResponse

        Raises:
            InvalidRequest: Neither a record nor a non-blank description was given
            MalformedInput: The record or the decomposition is not an object
            UpstreamUnavailable: Decomposition needed and no provider answered
        """
        if request.architecture_summary is not None:
            record = self.normalizer.normalize(request.architecture_summary)
            result = self.engine.evaluate(record, request.simulation)
            return AnalysisResponse(**dict(result))

        if not request.has_description:
            raise InvalidRequest("Either description or architecture_summary is required")

        outcome = self.decomposer.decompose(request.description)
        result = self.engine.evaluate(outcome.record, request.simulation)

        explanation = ""
        if self.explain and self.explainer is not None:
            explanation = self.explainer.explain(outcome.record, result).text

        logger.info(f"Analyzed description via {outcome.provider}")
        return AnalysisResponse(
            **dict(result),
            ai_explanation=explanation,
            ai_provider=outcome.provider,
        )

    def analyze_payload(self, payload: Any) -> AnalysisResponse:
        """Validate a raw JSON payload and analyze it."""
        return self.analyze(parse_request(payload))
