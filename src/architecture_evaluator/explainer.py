"""Narrative explanations of evaluation results."""

import json
from dataclasses import dataclass
from typing import Optional

from .app_logging import get_logger
from .errors import UpstreamUnavailable
from .prompts import EXPLANATION_PROMPT
from .providers import ProviderChain
from .schema import ArchitectureRecord, EvaluationResult

logger = get_logger("explainer")

DEFAULT_PLACEHOLDER = "AI explanation unavailable."


@dataclass(frozen=True)
class ExplanationOutcome:
    """Explanation text and the provider that wrote it (None when degraded)."""
    text: str
    provider: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.provider is None


def build_analysis_context(record: ArchitectureRecord, result: EvaluationResult) -> str:
    """Serialize the record and headline results as the model's input."""
    sections = [
        ("Architecture", record.model_dump(mode="json")),
        ("Scores", result.scores.model_dump(mode="json")),
        ("Risks", result.risk_analysis.model_dump(mode="json")),
        ("Cost", result.cost_analysis.model_dump(mode="json")),
    ]
    return "\n\n".join(f"{title}: {json.dumps(data)}" for title, data in sections)


class NarrativeExplainer:
    """Asks a language model to explain an evaluation in prose.

    Explanation is optional output: when no provider answers, the
    placeholder text is returned instead of an error.
    """

    def __init__(self, chain: ProviderChain, placeholder: str = DEFAULT_PLACEHOLDER):
        self.chain = chain
        self.placeholder = placeholder

    def explain(self, record: ArchitectureRecord, result: EvaluationResult) -> ExplanationOutcome:
        """Explain an evaluation result.

        Args:
            record: The record as decomposed (before any simulation overlay)
            result: The evaluation result

        Returns:
            ExplanationOutcome; degraded (placeholder text) if no provider answered
        """
        context = build_analysis_context(record, result)
        try:
            completion = self.chain.complete(EXPLANATION_PROMPT, context)
        except UpstreamUnavailable as e:
            logger.warning(f"AI explanation failed: {e.message}")
            return ExplanationOutcome(text=self.placeholder)

        return ExplanationOutcome(text=completion.text.strip(), provider=completion.provider)
