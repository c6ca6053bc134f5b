"""End-to-end tests for the evaluation engine."""

import json

import pytest
from pydantic import ValidationError

from architecture_evaluator import __version__
from architecture_evaluator.engine import EvaluationEngine, evaluate_architecture
from architecture_evaluator.schema import (
    MAX_ADDED_REGIONS,
    MAX_COUNT,
    MAX_TRAFFIC_MULTIPLIER,
    ArchitectureRecord,
    EvaluationResult,
    MaturityTier,
    RiskLevel,
    SimulationParameters,
)
from architecture_evaluator.scorer import CategoryWeights


class TestEvaluate:
    """Full evaluation of known records."""

    def test_single_vm_scenario(self, single_vm_record, fixed_time):
        result = EvaluationEngine().evaluate(single_vm_record, evaluated_at=fixed_time)

        assert result.engine_version == __version__
        assert result.timestamp == fixed_time
        assert result.architecture_summary == single_vm_record
        assert result.simulation is None
        assert result.scores.overall == 44
        assert result.risk_analysis.risk_level == RiskLevel.CRITICAL
        assert result.cost_analysis.total_current == 425
        assert result.confidence_score == 0.67
        assert result.maturity_level == MaturityTier.EARLY_STAGE
        assert len(result.improvement_plan) == 4

    def test_enterprise_record(self, enterprise_record):
        result = evaluate_architecture(enterprise_record)
        assert result.scores.overall == 97
        assert result.maturity_level == MaturityTier.ENTERPRISE_GRADE
        assert result.risk_analysis.risk_level == RiskLevel.LOW
        assert result.improvement_plan[0].title == "Advanced Optimization"

    def test_empty_record(self, empty_record):
        result = evaluate_architecture(empty_record)
        assert result.scores.overall == 0
        assert result.maturity_level == MaturityTier.PROTOTYPE
        assert result.confidence_score == 0.0

    def test_deterministic_apart_from_timestamp(self, single_vm_record, fixed_time):
        engine = EvaluationEngine()
        params = SimulationParameters(traffic_multiplier=3, add_regions=1, cost_target=400)
        first = engine.evaluate(single_vm_record, params, evaluated_at=fixed_time)
        second = engine.evaluate(single_vm_record, params, evaluated_at=fixed_time)
        assert first == second

    def test_result_serializes_to_json(self, single_vm_record):
        result = evaluate_architecture(single_vm_record)
        data = json.loads(result.model_dump_json())
        assert data["architecture_summary"]["compute_model"] == "ec2"
        assert data["risk_analysis"]["risk_level"] == "Critical"
        assert data["maturity_level"] == "Early Stage"
        assert EvaluationResult.model_validate(data) == result

    def test_custom_weights_only_change_overall(self, single_vm_record):
        default = evaluate_architecture(single_vm_record)
        weighted = EvaluationEngine(CategoryWeights(0.25, 0.25, 0.25, 0.25)).evaluate(single_vm_record)
        assert weighted.scores.scalability == default.scores.scalability
        # (45 + 65 + 40 + 20) / 4 = 42.5
        assert weighted.scores.overall == 43


class TestSimulatedEvaluation:
    """The overlay is applied once and every stage sees the effective record."""

    def test_traffic_applied_once(self, single_vm_record):
        params = SimulationParameters(traffic_multiplier=2.5)
        result = evaluate_architecture(single_vm_record, params)
        assert result.architecture_summary.estimated_users == 1250
        assert result.simulation == params
        # 1250 users without caching crosses the saturation threshold
        assert "Performance Saturation" in [r.type for r in result.risk_analysis.risks]
        assert result.cost_analysis.total_current == 553

    def test_added_region(self, single_vm_record):
        result = evaluate_architecture(single_vm_record, SimulationParameters(add_regions=1))
        assert result.architecture_summary.multi_region is True
        assert result.scores.scalability.score == 50
        assert result.scores.reliability.score == 75
        assert "Regional Dependency" not in [r.type for r in result.risk_analysis.risks]
        assert "Geographic Expansion" not in [p.title for p in result.improvement_plan]
        assert result.cost_analysis.total_current == 1020

    def test_cost_target_penalty_and_clamp_share_parameters(self, single_vm_record):
        result = evaluate_architecture(single_vm_record, SimulationParameters(cost_target=50))
        assert result.scores.cost_efficiency.score == 15
        assert result.cost_analysis.total_optimized == 50
        assert result.cost_analysis.cost_target_applied is True

    @pytest.mark.parametrize("compute_model", ["ec2", "ecs", "eks", "lambda", "fargate"])
    def test_maximum_size_record(self, compute_model):
        record = ArchitectureRecord(
            compute_model=compute_model,
            compute_count=MAX_COUNT,
            database_type="aurora",
            database_replicas=MAX_COUNT,
            serverless_components=MAX_COUNT,
            estimated_users=MAX_COUNT,
            load_balancer="alb",
            cdn="cloudfront",
            monitoring="datadog",
            waf=True,
            multi_region=True,
        )
        params = SimulationParameters(
            traffic_multiplier=MAX_TRAFFIC_MULTIPLIER,
            add_regions=MAX_ADDED_REGIONS,
            cost_target=1e12,
        )

        result = evaluate_architecture(record, params)

        assert result.architecture_summary.estimated_users == MAX_COUNT
        cost = result.cost_analysis
        assert cost.total_current - cost.monthly_savings == cost.total_optimized
        assert cost.total_optimized <= 10**12
        assert 0 <= result.scores.overall <= 100

    def test_simulated_users_stay_bounded(self):
        record = ArchitectureRecord(estimated_users=MAX_COUNT - 1)
        result = evaluate_architecture(record, SimulationParameters(traffic_multiplier=2))
        assert result.architecture_summary.estimated_users == MAX_COUNT

    @pytest.mark.parametrize("kwargs", [
        {"compute_count": MAX_COUNT + 1},
        {"estimated_users": 10**308},
    ])
    def test_oversized_record_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            ArchitectureRecord(**kwargs)

    def test_input_record_not_mutated(self, single_vm_record):
        before = single_vm_record.model_copy()
        evaluate_architecture(single_vm_record, SimulationParameters(traffic_multiplier=4, add_regions=2))
        assert single_vm_record == before
