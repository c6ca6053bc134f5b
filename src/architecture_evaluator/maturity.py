"""Confidence Estimator and Maturity Classifier."""

from .schema import ArchitectureRecord, MaturityTier


def completeness_checks(record: ArchitectureRecord) -> list[bool]:
    """Fifteen "is this field meaningfully populated" checks, in fixed order."""
    return [
        record.compute_model.value != "none",
        record.compute_count > 0,
        record.scaling_type.value != "none",
        record.database_type.value != "none",
        record.load_balancer.value != "none",
        record.vpc,
        record.monitoring.value != "none",
        record.encryption,
        record.ssl_tls,
        record.iam_configured,
        record.caching_layer.value != "none",
        record.cdn.value != "none",
        record.backup_strategy,
        record.ci_cd,
        record.estimated_users > 0,
    ]


def calculate_confidence(record: ArchitectureRecord) -> float:
    """Fraction of expected fields that were populated, to two decimals."""
    checks = completeness_checks(record)
    return round(sum(checks) / len(checks), 2)


# (minimum overall score, minimum confidence, tier), first match wins
MATURITY_TIERS = (
    (80, 0.7, MaturityTier.ENTERPRISE_GRADE),
    (60, 0.5, MaturityTier.PRODUCTION_READY),
    (35, 0.3, MaturityTier.EARLY_STAGE),
)


def determine_maturity(overall: int, confidence: float) -> MaturityTier:
    """Classify deployment maturity from overall score and confidence."""
    for min_score, min_confidence, tier in MATURITY_TIERS:
        if overall >= min_score and confidence >= min_confidence:
            return tier
    return MaturityTier.PROTOTYPE
