"""Pydantic models for the Architecture Evaluator.

Input schema for the structured architecture record and simulation overlay,
and output schemas for scores, risks, cost projections and the improvement plan.
Field names of ArchitectureRecord match the JSON produced by the decomposition
prompt, so a decomposed description can be validated directly.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Architecture Record Enums
# =============================================================================


class ComputeModel(str, Enum):
    """How application compute is provisioned."""
    NONE = "none"
    VM = "ec2"
    MANAGED_CONTAINER = "ecs"
    CONTAINER_CLUSTER = "eks"
    SERVERLESS_FUNCTION = "lambda"
    SERVERLESS_CONTAINER = "fargate"


class ScalingMode(str, Enum):
    """Compute scaling strategy."""
    NONE = "none"
    MANUAL = "manual"
    AUTOMATIC = "auto_scaling"


class DatabaseKind(str, Enum):
    """Primary data store."""
    NONE = "none"
    RELATIONAL_MANAGED = "rds"
    RELATIONAL_DISTRIBUTED = "aurora"
    KEY_VALUE_MANAGED = "dynamodb"
    CACHE_ONLY = "redis_only"


class CachingLayer(str, Enum):
    """Caching tier in front of the data store."""
    NONE = "none"
    MANAGED_CACHE = "elasticache"
    SELF_HOSTED_CACHE = "redis"


class LoadBalancerKind(str, Enum):
    """Load balancer type."""
    NONE = "none"
    APPLICATION = "alb"
    NETWORK = "nlb"


class CdnKind(str, Enum):
    """Content delivery network vendor."""
    NONE = "none"
    CLOUDFRONT = "cloudfront"
    CLOUDFLARE = "cloudflare"


class MonitoringKind(str, Enum):
    """Monitoring / observability vendor."""
    NONE = "none"
    CLOUDWATCH = "cloudwatch"
    DATADOG = "datadog"
    PROMETHEUS = "prometheus"


class OrchestrationKind(str, Enum):
    """Container orchestration platform."""
    NONE = "none"
    KUBERNETES = "kubernetes"
    MANAGED_CONTAINER_SERVICE = "ecs"


# =============================================================================
# Result Enums
# =============================================================================


class RiskSeverity(str, Enum):
    """Severity of a single risk finding."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    """Aggregate risk level across all findings."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class MaturityTier(str, Enum):
    """Coarse deployment maturity classification."""
    ENTERPRISE_GRADE = "Enterprise Grade"
    PRODUCTION_READY = "Production Ready"
    EARLY_STAGE = "Early Stage"
    PROTOTYPE = "Prototype"


# =============================================================================
# Input Models
# =============================================================================

# Upper bounds keeping every cost and user projection finite
MAX_COUNT = 1_000_000_000
MAX_TRAFFIC_MULTIPLIER = 1000.0
MAX_ADDED_REGIONS = 100


class ArchitectureRecord(BaseModel):
    """Structured snapshot of a deployment's technology choices.

    This is the sole input to scoring. Every field has a none/false/0 default
    so the record is never partially undefined. Untrusted data (decomposition
    output, API payloads) should go through RecordNormalizer rather than be
    validated directly, so unknown enum values degrade to their default.
    """
    model_config = ConfigDict(frozen=True)

    # Compute
    compute_model: ComputeModel = ComputeModel.NONE
    compute_count: int = Field(0, ge=0, le=MAX_COUNT)
    scaling_type: ScalingMode = ScalingMode.NONE

    # Data
    database_type: DatabaseKind = DatabaseKind.NONE
    database_multi_az: bool = False
    database_replicas: int = Field(0, ge=0, le=MAX_COUNT)
    caching_layer: CachingLayer = CachingLayer.NONE

    # Network / edge
    load_balancer: LoadBalancerKind = LoadBalancerKind.NONE
    cdn: CdnKind = CdnKind.NONE
    api_gateway: bool = False

    # Security
    vpc: bool = False
    private_subnets: bool = False
    waf: bool = False
    encryption: bool = False
    ssl_tls: bool = False
    iam_configured: bool = False
    security_groups: bool = False

    # Operations
    monitoring: MonitoringKind = MonitoringKind.NONE
    ci_cd: bool = False
    container_orchestration: OrchestrationKind = OrchestrationKind.NONE

    # Economics
    reserved_instances: bool = False
    spot_instances: bool = False
    serverless_components: int = Field(0, ge=0, le=MAX_COUNT)

    # Scale context
    multi_region: bool = False
    backup_strategy: bool = False
    microservices: bool = False
    estimated_users: int = Field(0, ge=0, le=MAX_COUNT)  # 0 = unknown

    @property
    def has_database(self) -> bool:
        return self.database_type != DatabaseKind.NONE


class SimulationParameters(BaseModel):
    """What-if overlay applied to a record before evaluation."""
    model_config = ConfigDict(frozen=True)

    traffic_multiplier: float = Field(1.0, gt=0, le=MAX_TRAFFIC_MULTIPLIER, allow_inf_nan=False)
    add_regions: int = Field(0, ge=0, le=MAX_ADDED_REGIONS)
    cost_target: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

    @property
    def has_cost_target(self) -> bool:
        """A cost target of zero is treated as not supplied."""
        return self.cost_target is not None and self.cost_target > 0


# =============================================================================
# Scoring Output Models
# =============================================================================


class CategoryResult(BaseModel):
    """Score for one category with its explanation trail."""
    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    max_score: int = 100
    explanation: list[str] = Field(default_factory=list)
    violated_principles: list[str] = Field(default_factory=list)


class CategoryScores(BaseModel):
    """Overall score and the four category results."""
    model_config = ConfigDict(frozen=True)

    overall: int = Field(..., ge=0, le=100)
    scalability: CategoryResult
    reliability: CategoryResult
    security: CategoryResult
    cost_efficiency: CategoryResult


class RiskFinding(BaseModel):
    """A single typed, severity-ranked weakness."""
    model_config = ConfigDict(frozen=True)

    type: str
    component: str
    impact: str
    severity: RiskSeverity


class RiskAnalysis(BaseModel):
    """All risk findings plus the aggregate level."""
    model_config = ConfigDict(frozen=True)

    risk_level: RiskLevel
    risks: list[RiskFinding] = Field(default_factory=list)


class CostBreakdownLine(BaseModel):
    """Monthly cost for one category, in whole currency units."""
    model_config = ConfigDict(frozen=True)

    category: str
    current: int = Field(..., ge=0)
    optimized: int = Field(..., ge=0)


class CostAnalysis(BaseModel):
    """Monthly cost projection."""
    model_config = ConfigDict(frozen=True)

    total_current: int
    total_optimized: int
    monthly_savings: int
    breakdown: list[CostBreakdownLine] = Field(default_factory=list)
    region_multiplier: float = 1.0
    cost_target_applied: bool = False


class ImprovementPhase(BaseModel):
    """One phase of the remediation roadmap."""
    model_config = ConfigDict(frozen=True)

    phase: int = Field(..., ge=1)
    title: str
    category: str
    actions: list[str]
    impact: str
    impact_points: Optional[int] = None


class EvaluationResult(BaseModel):
    """Complete output of one evaluation.

    Fully determined by the input record and simulation parameters, apart
    from the timestamp.
    """
    model_config = ConfigDict(frozen=True)

    # Metadata
    engine_version: str = Field(default="1.0.0")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Input (after simulation overlay)
    architecture_summary: ArchitectureRecord
    simulation: Optional[SimulationParameters] = None

    # Results
    scores: CategoryScores
    risk_analysis: RiskAnalysis
    cost_analysis: CostAnalysis
    improvement_plan: list[ImprovementPhase] = Field(default_factory=list)
    confidence_score: float = Field(..., ge=0, le=1)
    maturity_level: MaturityTier
