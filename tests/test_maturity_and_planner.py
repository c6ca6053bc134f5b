"""Tests for confidence, maturity classification and the improvement planner."""

import pytest

from architecture_evaluator.maturity import calculate_confidence, determine_maturity
from architecture_evaluator.planner import (
    ADVANCED_OPTIMIZATION_ACTIONS,
    GEOGRAPHIC_EXPANSION_ACTIONS,
    generate_improvement_plan,
)
from architecture_evaluator.schema import ArchitectureRecord, CdnKind, MaturityTier
from architecture_evaluator.scorer import CategoryScorer

# One value per completeness check, in check order
POPULATED_FIELDS = {
    "compute_model": "ec2",
    "compute_count": 1,
    "scaling_type": "manual",
    "database_type": "rds",
    "load_balancer": "alb",
    "vpc": True,
    "monitoring": "cloudwatch",
    "encryption": True,
    "ssl_tls": True,
    "iam_configured": True,
    "caching_layer": "redis",
    "cdn": "cloudfront",
    "backup_strategy": True,
    "ci_cd": True,
    "estimated_users": 10,
}


class TestConfidence:
    """Completeness fraction."""

    def test_single_vm_scenario(self, single_vm_record):
        # 10 of 15 checks populated
        assert calculate_confidence(single_vm_record) == 0.67

    def test_bounds(self, empty_record, enterprise_record):
        assert calculate_confidence(empty_record) == 0.0
        assert calculate_confidence(enterprise_record) == 1.0

    @pytest.mark.parametrize("populated", range(16))
    def test_multiple_of_one_fifteenth(self, populated):
        updates = list(POPULATED_FIELDS.items())[:populated]
        record = ArchitectureRecord(**dict(updates))
        assert calculate_confidence(record) == round(populated / 15, 2)


class TestMaturity:
    """Tier thresholds, first match wins."""

    @pytest.mark.parametrize("overall,confidence,tier", [
        (80, 0.7, MaturityTier.ENTERPRISE_GRADE),
        (95, 0.69, MaturityTier.PRODUCTION_READY),
        (60, 0.5, MaturityTier.PRODUCTION_READY),
        (59, 0.9, MaturityTier.EARLY_STAGE),
        (35, 0.3, MaturityTier.EARLY_STAGE),
        (90, 0.2, MaturityTier.PROTOTYPE),
        (34, 1.0, MaturityTier.PROTOTYPE),
    ])
    def test_tiers(self, overall, confidence, tier):
        assert determine_maturity(overall, confidence) == tier


class TestImprovementPlan:
    """Phase selection, actions and numbering."""

    def test_single_vm_scenario(self, single_vm_record):
        scores = CategoryScorer().score_all(single_vm_record)
        plan = generate_improvement_plan(single_vm_record, scores)

        assert [p.title for p in plan] == [
            "Scalability Foundation",
            "Security Posture",
            "Cost Optimization",
            "Geographic Expansion",
        ]
        assert [p.phase for p in plan] == [1, 2, 3, 4]

        scalability = plan[0]
        assert scalability.actions == ["Add ElastiCache Redis for session/query caching"]
        assert scalability.impact == "+40 scalability points"

        security = plan[1]
        assert security.actions == [
            "Enable AWS WAF with managed rule sets (OWASP)",
            "Enable encryption at rest (KMS) and in transit",
        ]

        cost = plan[2]
        assert cost.impact == "+30 cost efficiency points"
        assert len(cost.actions) == 3

        assert plan[3].actions == GEOGRAPHIC_EXPANSION_ACTIONS
        assert plan[3].impact == "+5-10 points across all categories"

    def test_impact_capped_by_headroom(self):
        record = ArchitectureRecord(waf=True, encryption=True, ssl_tls=True, private_subnets=True)
        scores = CategoryScorer().score_all(record)
        # security = 55, so headroom 45 is capped at 40
        plan = generate_improvement_plan(record, scores)
        security = next(p for p in plan if p.category == "security")
        assert security.impact_points == 40

    def test_empty_record_gets_every_phase(self, empty_record):
        plan = generate_improvement_plan(empty_record, CategoryScorer().score_all(empty_record))
        assert [p.category for p in plan] == [
            "scalability", "reliability", "security", "cost_efficiency", "geographic",
        ]

    def test_enterprise_record_gets_advanced_optimization(self, enterprise_record):
        plan = generate_improvement_plan(enterprise_record, CategoryScorer().score_all(enterprise_record))
        assert len(plan) == 1
        assert plan[0].phase == 1
        assert plan[0].title == "Advanced Optimization"
        assert plan[0].actions == ADVANCED_OPTIMIZATION_ACTIONS

    def test_weak_category_without_applicable_actions_is_skipped(self):
        # Cost efficiency is 35, but no cost action applies: not on VMs,
        # already serverless, CDN present
        record = ArchitectureRecord(serverless_components=1, cdn=CdnKind.CLOUDFRONT)
        scores = CategoryScorer().score_all(record)
        assert scores.cost_efficiency.score == 35
        plan = generate_improvement_plan(record, scores)
        assert "cost_efficiency" not in [p.category for p in plan]
