"""Improvement Planner.

Maps weak category scores and unmet conditions onto a phased remediation
roadmap. Each action carries the condition that makes it relevant, so a
phase only lists work the architecture actually needs.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .app_logging import get_logger
from .schema import (
    ArchitectureRecord,
    CategoryScores,
    ComputeModel,
    ImprovementPhase,
    ScalingMode,
)

logger = get_logger("planner")


@dataclass(frozen=True)
class RemediationAction:
    """An action and the predicate under which it is needed."""
    needed: Callable[[ArchitectureRecord], bool]
    text: str


@dataclass(frozen=True)
class PhaseTemplate:
    """A category-driven phase of the roadmap."""
    category: str
    title: str
    threshold: int
    impact_cap: int
    impact_label: str
    actions: tuple[RemediationAction, ...]


PHASE_TEMPLATES = (
    PhaseTemplate(
        category="scalability",
        title="Scalability Foundation",
        threshold=50,
        impact_cap=40,
        impact_label="scalability",
        actions=(
            RemediationAction(lambda r: r.scaling_type != ScalingMode.AUTOMATIC,
                              "Implement Auto Scaling Groups with target tracking policies"),
            RemediationAction(lambda r: r.load_balancer.value == "none",
                              "Deploy Application Load Balancer with health checks"),
            RemediationAction(lambda r: r.caching_layer.value == "none",
                              "Add ElastiCache Redis for session/query caching"),
        ),
    ),
    PhaseTemplate(
        category="reliability",
        title="Reliability Hardening",
        threshold=50,
        impact_cap=40,
        impact_label="reliability",
        actions=(
            RemediationAction(lambda r: not r.database_multi_az,
                              "Enable Multi-AZ for database failover"),
            RemediationAction(lambda r: not r.backup_strategy,
                              "Configure automated daily backups with 30-day retention"),
            RemediationAction(lambda r: r.monitoring.value == "none",
                              "Deploy CloudWatch with custom dashboards and alarms"),
            RemediationAction(lambda r: not r.ci_cd,
                              "Set up CI/CD pipeline with blue-green deployments"),
        ),
    ),
    PhaseTemplate(
        category="security",
        title="Security Posture",
        threshold=60,
        impact_cap=40,
        impact_label="security",
        actions=(
            RemediationAction(lambda r: not r.waf,
                              "Enable AWS WAF with managed rule sets (OWASP)"),
            RemediationAction(lambda r: not r.encryption,
                              "Enable encryption at rest (KMS) and in transit"),
            RemediationAction(lambda r: not r.vpc,
                              "Migrate to VPC with public/private subnet architecture"),
            RemediationAction(lambda r: not r.iam_configured,
                              "Implement IAM roles with least-privilege policies"),
        ),
    ),
    PhaseTemplate(
        category="cost_efficiency",
        title="Cost Optimization",
        threshold=50,
        impact_cap=30,
        impact_label="cost efficiency",
        actions=(
            RemediationAction(lambda r: not r.reserved_instances and r.compute_model == ComputeModel.VM,
                              "Purchase Reserved Instances for baseline capacity (up to 40% savings)"),
            RemediationAction(lambda r: r.serverless_components == 0,
                              "Migrate suitable workloads to Lambda/Fargate"),
            RemediationAction(lambda r: r.cdn.value == "none",
                              "Add CloudFront CDN to reduce origin server costs"),
        ),
    ),
)

GEOGRAPHIC_EXPANSION_ACTIONS = [
    "Deploy to secondary AWS region with Route53 failover",
    "Configure cross-region database replication",
    "Set up CloudFront with multi-origin configuration",
]

ADVANCED_OPTIMIZATION_ACTIONS = [
    "Implement chaos engineering with AWS Fault Injection Simulator",
    "Add distributed tracing with X-Ray",
    "Implement FinOps practices with Cost Explorer automation",
]


def _category_score(scores: CategoryScores, category: str) -> int:
    return getattr(scores, category).score


def _build_phase(
    template: PhaseTemplate,
    record: ArchitectureRecord,
    score: int,
    number: int,
) -> Optional[ImprovementPhase]:
    """Build a phase for a weak category, or None if no action applies."""
    actions = [action.text for action in template.actions if action.needed(record)]
    if not actions:
        return None

    points = min(template.impact_cap, 100 - score)
    return ImprovementPhase(
        phase=number,
        title=template.title,
        category=template.category,
        actions=actions,
        impact=f"+{points} {template.impact_label} points",
        impact_points=points,
    )


def generate_improvement_plan(
    record: ArchitectureRecord,
    scores: CategoryScores,
) -> list[ImprovementPhase]:
    """Generate the ordered remediation roadmap.

    Args:
        record: Effective architecture record
        scores: Category results for the same record

    Returns:
        Phases numbered from 1 in the order scalability, reliability,
        security, cost efficiency, geographic expansion; a single
        "Advanced Optimization" phase when nothing else qualifies
    """
    phases: list[ImprovementPhase] = []

    for template in PHASE_TEMPLATES:
        score = _category_score(scores, template.category)
        if score >= template.threshold:
            continue
        phase = _build_phase(template, record, score, len(phases) + 1)
        if phase is not None:
            phases.append(phase)

    if not record.multi_region:
        phases.append(ImprovementPhase(
            phase=len(phases) + 1,
            title="Geographic Expansion",
            category="geographic",
            actions=list(GEOGRAPHIC_EXPANSION_ACTIONS),
            impact="+5-10 points across all categories",
        ))

    if not phases:
        phases.append(ImprovementPhase(
            phase=1,
            title="Advanced Optimization",
            category="operational_excellence",
            actions=list(ADVANCED_OPTIMIZATION_ACTIONS),
            impact="Operational excellence and cost visibility",
        ))

    logger.debug("Improvement plan has %d phase(s)", len(phases))
    return phases
