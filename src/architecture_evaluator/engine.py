"""Evaluation Engine.

Sequences the pure evaluation stages for one architecture record:

1. Simulation overlay (applied once)
2. Category scorers, risk analyzer and cost analyzer
3. Confidence estimator and maturity classifier
4. Improvement planner

The engine holds no state between calls, performs no I/O and caches
nothing; the same input always recomputes the same result.
"""

from datetime import datetime, timezone
from typing import Optional

from . import __version__
from .app_logging import get_logger
from .cost_analyzer import analyze_costs
from .maturity import calculate_confidence, determine_maturity
from .planner import generate_improvement_plan
from .risk_analyzer import analyze_risks
from .schema import ArchitectureRecord, EvaluationResult, SimulationParameters
from .scorer import CategoryScorer, CategoryWeights
from .simulation import apply_simulation

logger = get_logger("engine")


class EvaluationEngine:
    """Evaluates architecture records into complete evaluation results."""

    def __init__(self, weights: Optional[CategoryWeights] = None):
        """Initialize engine with optional category weights for the overall score."""
        self.scorer = CategoryScorer(weights)

    def evaluate(
        self,
        record: ArchitectureRecord,
        simulation: Optional[SimulationParameters] = None,
        evaluated_at: Optional[datetime] = None,
    ) -> EvaluationResult:
        """Evaluate a record, optionally under a what-if simulation.

        Args:
            record: Normalized architecture record as submitted
            simulation: Optional simulation parameters; the overlay is
                applied exactly once and its output is what every stage sees
            evaluated_at: Timestamp to stamp on the result (defaults to now, UTC)

        Returns:
            Immutable evaluation result
        """
        effective = apply_simulation(record, simulation)

        scores = self.scorer.score_all(effective, simulation)
        risk_analysis = analyze_risks(effective)
        cost_analysis = analyze_costs(effective, simulation)

        confidence = calculate_confidence(effective)
        maturity = determine_maturity(scores.overall, confidence)

        improvement_plan = generate_improvement_plan(effective, scores)

        logger.info(
            "Evaluated architecture: overall=%d risk=%s maturity=%s simulated=%s",
            scores.overall, risk_analysis.risk_level.value, maturity.value, simulation is not None,
        )

        return EvaluationResult(
            engine_version=__version__,
            timestamp=evaluated_at or datetime.now(timezone.utc),
            architecture_summary=effective,
            simulation=simulation,
            scores=scores,
            risk_analysis=risk_analysis,
            cost_analysis=cost_analysis,
            improvement_plan=improvement_plan,
            confidence_score=confidence,
            maturity_level=maturity,
        )


def evaluate_architecture(
    record: ArchitectureRecord,
    simulation: Optional[SimulationParameters] = None,
) -> EvaluationResult:
    """Evaluate a record with default category weights."""
    return EvaluationEngine().evaluate(record, simulation)
