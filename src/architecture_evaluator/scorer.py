"""Category Scorers.

Scores an effective architecture record in four independent categories:
scalability, reliability, security and cost efficiency.

Each category is an ordered table of rules. A rule is an ordered list of
branches; the first branch whose predicate holds fires, adds its points,
contributes its explanation line and, when the rule's positive condition is
not met, names the violated principle. The explanation trail is therefore a
direct projection of the table, in table order.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union

from .app_logging import get_logger
from .rounding import round_half_up
from .schema import (
    ArchitectureRecord,
    CategoryResult,
    CategoryScores,
    ComputeModel,
    DatabaseKind,
    ScalingMode,
    SimulationParameters,
)

logger = get_logger("scorer")

MAX_CATEGORY_SCORE = 100

Predicate = Callable[[ArchitectureRecord], bool]
Points = Union[int, Callable[[ArchitectureRecord], int]]
Text = Union[None, str, Callable[[ArchitectureRecord], str]]


def _always(_: ArchitectureRecord) -> bool:
    return True


@dataclass(frozen=True)
class Branch:
    """One outcome of a rule."""
    when: Predicate
    points: Points = 0
    explanation: Text = None
    violates: Optional[str] = None

    def resolve_points(self, record: ArchitectureRecord) -> int:
        return self.points(record) if callable(self.points) else self.points

    def resolve_explanation(self, record: ArchitectureRecord) -> Optional[str]:
        if callable(self.explanation):
            return self.explanation(record)
        return self.explanation


@dataclass(frozen=True)
class ScoringRule:
    """An ordered set of mutually exclusive branches; the first match fires."""
    name: str
    branches: tuple[Branch, ...]

    def evaluate(self, record: ArchitectureRecord) -> Optional[Branch]:
        for branch in self.branches:
            if branch.when(record):
                return branch
        return None


def evaluate_rules(
    rules: tuple[ScoringRule, ...],
    record: ArchitectureRecord,
) -> tuple[int, list[str], list[str]]:
    """Evaluate a rule table in order.

    Returns:
        (uncapped score, explanation trail, violated principles)
    """
    score = 0
    explanation: list[str] = []
    violated: list[str] = []

    for rule in rules:
        branch = rule.evaluate(record)
        if branch is None:
            continue
        score += branch.resolve_points(record)
        text = branch.resolve_explanation(record)
        if text:
            explanation.append(text)
        if branch.violates and branch.violates not in violated:
            violated.append(branch.violates)

    return score, explanation, violated


def _cap(score: int) -> int:
    return max(0, min(score, MAX_CATEGORY_SCORE))


def _is_multi_region(record: ArchitectureRecord, simulation: Optional[SimulationParameters]) -> bool:
    return record.multi_region or (simulation is not None and simulation.add_regions > 0)


def _is_serverless(record: ArchitectureRecord) -> bool:
    return record.serverless_components > 0 or record.compute_model == ComputeModel.SERVERLESS_FUNCTION


def _replica_points(record: ArchitectureRecord) -> int:
    return min(10, record.database_replicas * 5)


# =============================================================================
# Rule Tables
# =============================================================================


SCALABILITY_RULES = (
    ScoringRule("scaling", (
        Branch(lambda r: r.scaling_type == ScalingMode.AUTOMATIC, 25, "Auto Scaling detected (+25)"),
        Branch(lambda r: r.scaling_type == ScalingMode.MANUAL, 8, "Manual scaling only (+8)",
               violates="Elastic Scalability"),
        Branch(_always, 0, "No scaling strategy detected (+0)", violates="Elastic Scalability"),
    )),
    ScoringRule("load_balancer", (
        Branch(lambda r: r.load_balancer.value != "none", 20,
               lambda r: f"{r.load_balancer.value.upper()} load balancer present (+20)"),
        Branch(_always, 0, "No load balancer detected (+0)", violates="Horizontal Distribution"),
    )),
    ScoringRule("cdn", (
        Branch(lambda r: r.cdn.value != "none", 10, lambda r: f"CDN ({r.cdn.value}) configured (+10)"),
        Branch(_always, 0, "No CDN configured (+0)", violates="Edge Caching Strategy"),
    )),
    ScoringRule("caching", (
        Branch(lambda r: r.caching_layer.value != "none", 10,
               lambda r: f"Caching layer ({r.caching_layer.value}) present (+10)"),
        Branch(_always, 0, "No caching layer detected (+0)", violates="Latency Optimization"),
    )),
    ScoringRule("cloud_native", (
        Branch(lambda r: r.container_orchestration.value != "none", 15,
               lambda r: f"Container orchestration ({r.container_orchestration.value}) enabled (+15)"),
        Branch(lambda r: r.serverless_components > 0, 15, "Serverless components detected (+15)"),
        Branch(lambda r: r.compute_model == ComputeModel.SERVERLESS_CONTAINER, 12,
               "Fargate compute model (+12)"),
        Branch(_always, 0, "No container orchestration or serverless (+0)",
               violates="Cloud-Native Scalability"),
    )),
    ScoringRule("microservices", (
        Branch(lambda r: r.microservices, 10, "Microservices architecture (+10)"),
        Branch(_always, 0, "Monolithic architecture detected (+0)"),
    )),
    ScoringRule("api_gateway", (
        Branch(lambda r: r.api_gateway, 5, "API Gateway configured (+5)"),
    )),
)

RELIABILITY_RULES = (
    ScoringRule("multi_az", (
        Branch(lambda r: r.database_multi_az, 25, "Multi-AZ database deployment (+25)"),
        Branch(_always, 0, "No Multi-AZ detected (+0)", violates="AZ Redundancy"),
    )),
    ScoringRule("replicas", (
        Branch(lambda r: r.database_replicas > 0, _replica_points,
               lambda r: f"{r.database_replicas} database replica(s) (+{_replica_points(r)})"),
    )),
    ScoringRule("backup", (
        Branch(lambda r: r.backup_strategy, 15, "Backup strategy configured (+15)"),
        Branch(_always, 0, "No backup strategy detected (+0)", violates="Disaster Recovery Readiness"),
    )),
    ScoringRule("monitoring", (
        Branch(lambda r: r.monitoring.value != "none", 15,
               lambda r: f"Monitoring ({r.monitoring.value}) active (+15)"),
        Branch(_always, 0, "No monitoring detected (+0)", violates="Observability"),
    )),
    ScoringRule("health_checks", (
        Branch(lambda r: r.load_balancer.value != "none", 10, "Load balancer health checks implied (+10)"),
    )),
    ScoringRule("multi_region", (
        Branch(lambda r: r.multi_region, 10, "Multi-region redundancy (+10)"),
        Branch(_always, violates="Geographic Redundancy"),
    )),
    ScoringRule("ci_cd", (
        Branch(lambda r: r.ci_cd, 10, "CI/CD pipeline detected (+10)"),
        Branch(_always, violates="Deployment Reliability"),
    )),
    ScoringRule("compute_redundancy", (
        Branch(lambda r: r.compute_count > 1, 5,
               lambda r: f"Multiple compute instances ({r.compute_count}) (+5)"),
        Branch(lambda r: r.compute_count == 1, violates="Single Point of Failure - Compute"),
    )),
)

SECURITY_RULES = (
    ScoringRule("waf", (
        Branch(lambda r: r.waf, 20, "WAF enabled (+20)"),
        Branch(_always, 0, "No WAF detected (+0)", violates="Perimeter Defense"),
    )),
    ScoringRule("encryption", (
        Branch(lambda r: r.encryption, 15, "Encryption at rest/transit (+15)"),
        Branch(_always, 0, "No encryption mentioned (+0)", violates="Data Encryption Standard"),
    )),
    ScoringRule("tls", (
        Branch(lambda r: r.ssl_tls, 10, "SSL/TLS configured (+10)"),
        Branch(_always, violates="Transport Layer Security"),
    )),
    ScoringRule("vpc", (
        Branch(lambda r: r.vpc, 15, "VPC configured (+15)"),
        Branch(_always, 0, "No VPC isolation (+0)", violates="Network Isolation"),
    )),
    ScoringRule("private_subnets", (
        Branch(lambda r: r.private_subnets, 10, "Private subnets configured (+10)"),
        Branch(_always, violates="Network Segmentation"),
    )),
    ScoringRule("iam", (
        Branch(lambda r: r.iam_configured, 15, "IAM policies configured (+15)"),
        Branch(_always, 0, "No IAM mentioned (+0)", violates="Least Privilege Access"),
    )),
    ScoringRule("security_groups", (
        Branch(lambda r: r.security_groups, 10, "Security groups configured (+10)"),
    )),
    ScoringRule("api_gateway", (
        Branch(lambda r: r.api_gateway, 5, "API Gateway adds throttling/auth layer (+5)"),
    )),
)

COST_EFFICIENCY_RULES = (
    ScoringRule("serverless", (
        Branch(_is_serverless, 25, "Serverless components reduce idle cost (+25)"),
        Branch(lambda r: r.compute_model == ComputeModel.SERVERLESS_CONTAINER, 15,
               "Fargate reduces operational overhead (+15)"),
    )),
    ScoringRule("reserved_instances", (
        Branch(lambda r: r.reserved_instances, 15, "Reserved instances for baseline savings (+15)"),
    )),
    ScoringRule("spot_instances", (
        Branch(lambda r: r.spot_instances, 10, "Spot instances for batch/flexible workloads (+10)"),
    )),
    ScoringRule("purchase_optimization", (
        Branch(lambda r: not r.reserved_instances and not r.spot_instances and r.compute_model == ComputeModel.VM,
               violates="Instance Purchase Optimization"),
    )),
    ScoringRule("cdn", (
        Branch(lambda r: r.cdn.value != "none", 10, "CDN reduces origin server load (+10)"),
    )),
    ScoringRule("caching", (
        Branch(lambda r: r.caching_layer.value != "none", 10, "Caching reduces database costs (+10)"),
    )),
    ScoringRule("right_sizing", (
        Branch(lambda r: r.scaling_type == ScalingMode.AUTOMATIC, 15, "Auto-scaling enables right-sizing (+15)"),
        Branch(_always, violates="Dynamic Right-Sizing"),
    )),
    ScoringRule("cost_visibility", (
        Branch(lambda r: r.monitoring.value != "none", 5, "Monitoring enables cost visibility (+5)"),
    )),
    ScoringRule("pay_per_use_database", (
        Branch(lambda r: r.database_type in (DatabaseKind.KEY_VALUE_MANAGED, DatabaseKind.RELATIONAL_DISTRIBUTED), 5,
               lambda r: f"{r.database_type.value} offers pay-per-use flexibility (+5)"),
    )),
)


# =============================================================================
# Category Scorers
# =============================================================================


def score_scalability(
    record: ArchitectureRecord,
    simulation: Optional[SimulationParameters] = None,
) -> CategoryResult:
    """Score how well the deployment absorbs load growth."""
    score, explanation, violated = evaluate_rules(SCALABILITY_RULES, record)

    if _is_multi_region(record, simulation):
        score += 5
        explanation.append("Multi-region deployment (+5)")

    return CategoryResult(score=_cap(score), explanation=explanation, violated_principles=violated)


def score_reliability(record: ArchitectureRecord) -> CategoryResult:
    """Score redundancy, recoverability and operability."""
    score, explanation, violated = evaluate_rules(RELIABILITY_RULES, record)
    return CategoryResult(score=_cap(score), explanation=explanation, violated_principles=violated)


def score_security(record: ArchitectureRecord) -> CategoryResult:
    """Score perimeter, data and network protection."""
    score, explanation, violated = evaluate_rules(SECURITY_RULES, record)
    return CategoryResult(score=_cap(score), explanation=explanation, violated_principles=violated)


def cost_target_penalty(cost_target: float) -> int:
    """Points removed from cost efficiency for a tight monthly cost target.

    Targets of 100 or more carry no penalty; each 10 units below that adds one
    point, up to 10.
    """
    return max(0, 10 - int(cost_target // 10))


def score_cost_efficiency(
    record: ArchitectureRecord,
    simulation: Optional[SimulationParameters] = None,
) -> CategoryResult:
    """Score purchasing and elasticity choices, less any cost-target penalty."""
    score, explanation, violated = evaluate_rules(COST_EFFICIENCY_RULES, record)

    if simulation is not None and simulation.has_cost_target:
        penalty = cost_target_penalty(simulation.cost_target)
        if penalty > 0:
            score = max(0, score - penalty)
            explanation.append(f"Cost target constraint applied (-{penalty})")

    return CategoryResult(score=_cap(score), explanation=explanation, violated_principles=violated)


@dataclass
class CategoryWeights:
    """Weights for combining category scores into the overall score."""
    scalability: float = 0.30
    reliability: float = 0.25
    security: float = 0.25
    cost_efficiency: float = 0.20


class CategoryScorer:
    """Runs all four category scorers and combines them.

    Scoring principles:
    - Categories are independent; no rule reads another category's result
    - Rule order is fixed, so explanation trails are reproducible
    - Points only accumulate, except for the cost-target penalty
    """

    def __init__(self, weights: Optional[CategoryWeights] = None):
        """Initialize scorer with optional custom weights."""
        self.weights = weights or CategoryWeights()

    def score_all(
        self,
        record: ArchitectureRecord,
        simulation: Optional[SimulationParameters] = None,
    ) -> CategoryScores:
        """Score every category for an effective record.

        Args:
            record: Effective architecture record (simulation already applied)
            simulation: Parameters used for the overlay, if any

        Returns:
            The four category results plus the weighted overall score
        """
        scalability = score_scalability(record, simulation)
        reliability = score_reliability(record)
        security = score_security(record)
        cost_efficiency = score_cost_efficiency(record, simulation)

        overall = self.overall_score(
            scalability.score, reliability.score, security.score, cost_efficiency.score
        )
        logger.debug(
            "Category scores: scalability=%d reliability=%d security=%d cost=%d overall=%d",
            scalability.score, reliability.score, security.score, cost_efficiency.score, overall,
        )

        return CategoryScores(
            overall=overall,
            scalability=scalability,
            reliability=reliability,
            security=security,
            cost_efficiency=cost_efficiency,
        )

    def overall_score(self, scalability: int, reliability: int, security: int, cost_efficiency: int) -> int:
        """Weighted sum of category scores, rounded half up and capped."""
        weighted = (
            scalability * self.weights.scalability
            + reliability * self.weights.reliability
            + security * self.weights.security
            + cost_efficiency * self.weights.cost_efficiency
        )
        return _cap(round_half_up(weighted))
