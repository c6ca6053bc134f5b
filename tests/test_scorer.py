"""Tests for the category scorers."""

import pytest

from architecture_evaluator.schema import (
    ArchitectureRecord,
    CdnKind,
    ComputeModel,
    DatabaseKind,
    LoadBalancerKind,
    OrchestrationKind,
    ScalingMode,
    SimulationParameters,
)
from architecture_evaluator.scorer import (
    CategoryScorer,
    CategoryWeights,
    cost_target_penalty,
    score_cost_efficiency,
    score_reliability,
    score_scalability,
    score_security,
)


class TestSingleVmScenario:
    """Known-answer tests for a single auto-scaled VM behind an ALB."""

    def test_scalability(self, single_vm_record):
        result = score_scalability(single_vm_record)
        assert result.score == 45
        assert result.max_score == 100
        assert result.explanation == [
            "Auto Scaling detected (+25)",
            "ALB load balancer present (+20)",
            "No CDN configured (+0)",
            "No caching layer detected (+0)",
            "No container orchestration or serverless (+0)",
            "Monolithic architecture detected (+0)",
        ]
        assert result.violated_principles == [
            "Edge Caching Strategy",
            "Latency Optimization",
            "Cloud-Native Scalability",
        ]

    def test_reliability(self, single_vm_record):
        result = score_reliability(single_vm_record)
        assert result.score == 65
        assert "Single Point of Failure - Compute" in result.violated_principles
        assert "Geographic Redundancy" in result.violated_principles
        assert "Deployment Reliability" in result.violated_principles
        assert "AZ Redundancy" not in result.violated_principles

    def test_security(self, single_vm_record):
        result = score_security(single_vm_record)
        assert result.score == 40
        assert result.violated_principles == [
            "Perimeter Defense",
            "Data Encryption Standard",
            "Transport Layer Security",
        ]

    def test_cost_efficiency(self, single_vm_record):
        result = score_cost_efficiency(single_vm_record)
        # Auto-scaling right-sizing (+15) and monitoring visibility (+5)
        assert result.score == 20
        assert result.violated_principles == ["Instance Purchase Optimization"]

    def test_overall_weighted_and_rounded(self, single_vm_record):
        scores = CategoryScorer().score_all(single_vm_record)
        # 45*0.30 + 65*0.25 + 40*0.25 + 20*0.20 = 43.75
        assert scores.overall == 44


class TestEmptyRecord:
    """A record with every field at its default."""

    def test_all_categories_zero(self, empty_record):
        scores = CategoryScorer().score_all(empty_record)
        assert scores.overall == 0
        assert scores.scalability.score == 0
        assert scores.reliability.score == 0
        assert scores.security.score == 0
        assert scores.cost_efficiency.score == 0

    def test_scalability_violations_in_table_order(self, empty_record):
        result = score_scalability(empty_record)
        assert result.violated_principles == [
            "Elastic Scalability",
            "Horizontal Distribution",
            "Edge Caching Strategy",
            "Latency Optimization",
            "Cloud-Native Scalability",
        ]

    def test_no_compute_is_not_single_point_of_failure(self, empty_record):
        result = score_reliability(empty_record)
        assert "Single Point of Failure - Compute" not in result.violated_principles


class TestEnterpriseRecord:
    """A fully featured record caps at 100."""

    def test_categories_capped(self, enterprise_record):
        scores = CategoryScorer().score_all(enterprise_record)
        assert scores.scalability.score == 100
        assert scores.reliability.score == 100
        assert scores.security.score == 100
        assert scores.cost_efficiency.score == 85
        assert scores.overall == 97

    def test_no_violations(self, enterprise_record):
        scores = CategoryScorer().score_all(enterprise_record)
        for name in ("scalability", "reliability", "security", "cost_efficiency"):
            assert getattr(scores, name).violated_principles == []


class TestScalabilityRules:
    """Branch selection within individual scalability rules."""

    def test_manual_scaling_still_violates_elasticity(self):
        result = score_scalability(ArchitectureRecord(scaling_type=ScalingMode.MANUAL))
        assert result.score == 8
        assert "Manual scaling only (+8)" in result.explanation
        assert "Elastic Scalability" in result.violated_principles

    def test_orchestration_beats_serverless(self):
        record = ArchitectureRecord(
            container_orchestration=OrchestrationKind.KUBERNETES,
            serverless_components=3,
        )
        result = score_scalability(record)
        assert "Container orchestration (kubernetes) enabled (+15)" in result.explanation
        assert "Serverless components detected (+15)" not in result.explanation

    def test_serverless_container_compute(self):
        result = score_scalability(ArchitectureRecord(compute_model=ComputeModel.SERVERLESS_CONTAINER))
        assert "Fargate compute model (+12)" in result.explanation
        assert "Cloud-Native Scalability" not in result.violated_principles

    def test_multi_region_bonus(self):
        record = ArchitectureRecord(multi_region=True)
        assert score_scalability(record).score == 5
        assert "Multi-region deployment (+5)" in score_scalability(record).explanation

    def test_added_regions_count_as_multi_region(self):
        result = score_scalability(ArchitectureRecord(), SimulationParameters(add_regions=1))
        assert result.score == 5

    def test_nlb_label(self):
        result = score_scalability(ArchitectureRecord(load_balancer=LoadBalancerKind.NETWORK))
        assert "NLB load balancer present (+20)" in result.explanation


class TestReliabilityRules:
    """Replica points and compute redundancy."""

    @pytest.mark.parametrize("replicas,points", [(1, 5), (2, 10), (5, 10)])
    def test_replica_points_capped_at_ten(self, replicas, points):
        result = score_reliability(ArchitectureRecord(database_replicas=replicas))
        assert result.score == points
        assert f"{replicas} database replica(s) (+{points})" in result.explanation

    def test_multiple_instances(self):
        result = score_reliability(ArchitectureRecord(compute_count=3))
        assert result.score == 5
        assert "Multiple compute instances (3) (+5)" in result.explanation


class TestCostEfficiencyRules:
    """Serverless branches, pay-per-use databases and cost target penalty."""

    def test_serverless_function_compute(self):
        result = score_cost_efficiency(ArchitectureRecord(compute_model=ComputeModel.SERVERLESS_FUNCTION))
        assert result.score == 25

    def test_serverless_container_compute(self):
        result = score_cost_efficiency(ArchitectureRecord(compute_model=ComputeModel.SERVERLESS_CONTAINER))
        assert result.score == 15
        assert "Fargate reduces operational overhead (+15)" in result.explanation

    @pytest.mark.parametrize("kind", [DatabaseKind.KEY_VALUE_MANAGED, DatabaseKind.RELATIONAL_DISTRIBUTED])
    def test_pay_per_use_databases(self, kind):
        result = score_cost_efficiency(ArchitectureRecord(database_type=kind))
        assert result.score == 5

    def test_purchase_optimization_only_for_vms(self):
        result = score_cost_efficiency(ArchitectureRecord(compute_model=ComputeModel.MANAGED_CONTAINER))
        assert "Instance Purchase Optimization" not in result.violated_principles

    @pytest.mark.parametrize("target,penalty", [
        (0.5, 10),
        (10, 9),
        (45, 6),
        (99.9, 1),
        (100, 0),
        (5000, 0),
    ])
    def test_cost_target_penalty(self, target, penalty):
        assert cost_target_penalty(target) == penalty

    def test_penalty_applied_and_explained(self, single_vm_record):
        result = score_cost_efficiency(single_vm_record, SimulationParameters(cost_target=50))
        assert result.score == 15
        assert result.explanation[-1] == "Cost target constraint applied (-5)"

    def test_penalty_floors_at_zero(self, empty_record):
        result = score_cost_efficiency(empty_record, SimulationParameters(cost_target=1))
        assert result.score == 0

    def test_zero_cost_target_is_ignored(self, single_vm_record):
        result = score_cost_efficiency(single_vm_record, SimulationParameters(cost_target=0))
        assert result.score == 20


class TestScoringProperties:
    """Determinism, bounds and monotonicity."""

    def test_deterministic(self, single_vm_record):
        scorer = CategoryScorer()
        assert scorer.score_all(single_vm_record) == scorer.score_all(single_vm_record)

    @pytest.mark.parametrize("update", [
        {"waf": True},
        {"encryption": True},
        {"cdn": CdnKind.CLOUDFLARE},
        {"ci_cd": True},
        {"database_replicas": 1},
        {"reserved_instances": True},
    ])
    def test_adding_a_capability_never_lowers_a_score(self, single_vm_record, update):
        scorer = CategoryScorer()
        before = scorer.score_all(single_vm_record)
        after = scorer.score_all(single_vm_record.model_copy(update=update))
        for name in ("scalability", "reliability", "security", "cost_efficiency"):
            assert getattr(after, name).score >= getattr(before, name).score
        assert after.overall >= before.overall

    def test_custom_weights(self, single_vm_record):
        scorer = CategoryScorer(CategoryWeights(scalability=1.0, reliability=0, security=0, cost_efficiency=0))
        assert scorer.score_all(single_vm_record).overall == 45

    def test_overall_rounds_half_up(self):
        scorer = CategoryScorer(CategoryWeights(scalability=0.5, reliability=0, security=0, cost_efficiency=0))
        # 45 * 0.5 = 22.5
        assert scorer.overall_score(45, 0, 0, 0) == 23
