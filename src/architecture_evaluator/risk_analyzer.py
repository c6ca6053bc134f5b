"""Risk Analyzer.

Detects typed, severity-ranked weaknesses in an effective architecture record
and derives the aggregate risk level.
"""

from dataclasses import dataclass
from typing import Callable, Union

from .app_logging import get_logger
from .schema import (
    ArchitectureRecord,
    CachingLayer,
    ComputeModel,
    LoadBalancerKind,
    MonitoringKind,
    RiskAnalysis,
    RiskFinding,
    RiskLevel,
    RiskSeverity,
    ScalingMode,
)

logger = get_logger("risk_analyzer")

# Above this many users, a missing cache is a saturation risk
CACHE_REQUIRED_USERS = 1000


@dataclass(frozen=True)
class RiskRule:
    """A condition that yields at most one finding."""
    when: Callable[[ArchitectureRecord], bool]
    type: str
    component: Union[str, Callable[[ArchitectureRecord], str]]
    impact: str
    severity: RiskSeverity

    def finding(self, record: ArchitectureRecord) -> RiskFinding:
        component = self.component(record) if callable(self.component) else self.component
        return RiskFinding(
            type=self.type,
            component=component,
            impact=self.impact,
            severity=self.severity,
        )


RISK_RULES = (
    RiskRule(
        when=lambda r: r.compute_count == 1 and r.compute_model != ComputeModel.SERVERLESS_FUNCTION,
        type="Single Point of Failure",
        component=lambda r: f"Single {r.compute_model.value.upper()} instance",
        impact="Complete service downtime if instance fails. No failover capability.",
        severity=RiskSeverity.CRITICAL,
    ),
    RiskRule(
        when=lambda r: r.scaling_type == ScalingMode.NONE,
        type="Scaling Bottleneck",
        component="Compute layer",
        impact="Cannot handle traffic spikes. Service degradation under load.",
        severity=RiskSeverity.HIGH,
    ),
    RiskRule(
        when=lambda r: r.compute_count > 1 and r.load_balancer == LoadBalancerKind.NONE,
        type="Traffic Distribution Gap",
        component="Network layer",
        impact="Multiple instances without load distribution. Uneven resource utilization.",
        severity=RiskSeverity.MEDIUM,
    ),
    RiskRule(
        when=lambda r: r.has_database and not r.database_multi_az,
        type="Database Availability Risk",
        component=lambda r: f"{r.database_type.value.upper()} database",
        impact="Single AZ deployment risks data loss and downtime during AZ failure.",
        severity=RiskSeverity.HIGH,
    ),
    RiskRule(
        when=lambda r: r.has_database and not r.backup_strategy,
        type="Data Loss Risk",
        component="Database layer",
        impact="No backup strategy detected. Risk of irrecoverable data loss.",
        severity=RiskSeverity.CRITICAL,
    ),
    RiskRule(
        when=lambda r: not r.waf,
        type="Application Security Risk",
        component="Edge/Perimeter",
        impact="No WAF protection against OWASP Top 10 attacks (SQLi, XSS, etc).",
        severity=RiskSeverity.HIGH,
    ),
    RiskRule(
        when=lambda r: not r.vpc,
        type="Network Isolation Risk",
        component="Network layer",
        impact="Resources may be publicly accessible. Increased attack surface.",
        severity=RiskSeverity.HIGH,
    ),
    RiskRule(
        when=lambda r: not r.encryption,
        type="Data Exposure Risk",
        component="Data layer",
        impact="Unencrypted data at rest/transit. Compliance and regulatory risk.",
        severity=RiskSeverity.MEDIUM,
    ),
    RiskRule(
        when=lambda r: r.monitoring == MonitoringKind.NONE,
        type="Blind Spot Risk",
        component="Observability",
        impact="No monitoring means delayed incident detection. Increased MTTR.",
        severity=RiskSeverity.MEDIUM,
    ),
    RiskRule(
        when=lambda r: r.caching_layer == CachingLayer.NONE and r.estimated_users > CACHE_REQUIRED_USERS,
        type="Performance Saturation",
        component="Application layer",
        impact="High traffic without caching will cause latency spikes and DB overload.",
        severity=RiskSeverity.MEDIUM,
    ),
    RiskRule(
        when=lambda r: not r.multi_region,
        type="Regional Dependency",
        component="Infrastructure",
        impact="Single region deployment. Regional outage causes complete service loss.",
        severity=RiskSeverity.LOW,
    ),
)


def aggregate_risk_level(risks: list[RiskFinding]) -> RiskLevel:
    """Derive the aggregate level by strict precedence, not a weighted sum."""
    if any(r.severity == RiskSeverity.CRITICAL for r in risks):
        return RiskLevel.CRITICAL

    high_count = sum(1 for r in risks if r.severity == RiskSeverity.HIGH)
    if high_count >= 2:
        return RiskLevel.HIGH
    if high_count == 1:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def analyze_risks(record: ArchitectureRecord) -> RiskAnalysis:
    """Evaluate every risk rule in order against an effective record."""
    risks = [rule.finding(record) for rule in RISK_RULES if rule.when(record)]
    risk_level = aggregate_risk_level(risks)
    logger.debug("Detected %d risk(s), aggregate level %s", len(risks), risk_level.value)
    return RiskAnalysis(risk_level=risk_level, risks=risks)
