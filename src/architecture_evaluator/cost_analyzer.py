"""Cost Analyzer.

Projects the monthly cost of an effective architecture record, per category,
along with an "optimized" figure reachable through the purchasing levers the
record already uses. Figures are list-price approximations, not quotes.
"""

from dataclasses import dataclass
from typing import Optional

from .app_logging import get_logger
from .rounding import round_half_up
from .schema import (
    ArchitectureRecord,
    ComputeModel,
    CostAnalysis,
    CostBreakdownLine,
    DatabaseKind,
    LoadBalancerKind,
    SimulationParameters,
)

logger = get_logger("cost_analyzer")

# Region multipliers
MULTI_REGION_MULTIPLIER = 1.8
ADDED_REGION_INCREMENT = 0.6


@dataclass(frozen=True)
class FlatCost:
    """A fixed monthly line for an optional feature."""
    category: str
    current: float
    optimized: float
    scales_with_traffic: bool = False


class CostModel:
    """Unit prices and discount ratios used by the cost projection."""

    # Compute: (unit price, default count, optimized ratio)
    VM_UNIT = 85
    VM_RESERVED_RATIO = 0.6
    VM_SPOT_RATIO = 0.5
    VM_DEFAULT_RATIO = 0.8

    CONTAINER_UNIT = 65
    CONTAINER_DEFAULT_COUNT = 2
    CONTAINER_RATIO = 0.75

    FUNCTION_BASE = 25
    FUNCTION_RATIO = 0.9

    CLUSTER_CONTROL_PLANE = 150
    CLUSTER_NODE_UNIT = 70
    CLUSTER_DEFAULT_COUNT = 3
    CLUSTER_RATIO = 0.7

    # Database
    RELATIONAL_MULTI_AZ = 280
    RELATIONAL_SINGLE_AZ = 140
    RELATIONAL_REPLICA = 100
    RELATIONAL_RESERVED_RATIO = 0.65
    RELATIONAL_DEFAULT_RATIO = 0.85

    DISTRIBUTED_MULTI_AZ = 350
    DISTRIBUTED_SINGLE_AZ = 200
    DISTRIBUTED_RATIO = 0.8

    KEY_VALUE_BASE = 50
    KEY_VALUE_RATIO = 0.7

    CACHING = FlatCost("Caching", 45, 40)
    APPLICATION_LOAD_BALANCER = FlatCost("Load Balancer", 25, 25)
    NETWORK_LOAD_BALANCER = FlatCost("Load Balancer", 20, 20)
    CDN = FlatCost("CDN", 30, 25, scales_with_traffic=True)
    MONITORING = FlatCost("Monitoring", 35, 35)
    WAF = FlatCost("WAF", 20, 20)


def _compute_cost(record: ArchitectureRecord, traffic: float) -> tuple[float, float]:
    """Return (current, optimized) compute cost."""
    model = record.compute_model
    m = CostModel

    if model == ComputeModel.VM:
        current = (record.compute_count or 1) * m.VM_UNIT * traffic
        if record.reserved_instances:
            ratio = m.VM_RESERVED_RATIO
        elif record.spot_instances:
            ratio = m.VM_SPOT_RATIO
        else:
            ratio = m.VM_DEFAULT_RATIO
        return current, current * ratio

    if model in (ComputeModel.MANAGED_CONTAINER, ComputeModel.SERVERLESS_CONTAINER):
        current = (record.compute_count or m.CONTAINER_DEFAULT_COUNT) * m.CONTAINER_UNIT * traffic
        return current, current * m.CONTAINER_RATIO

    if model == ComputeModel.SERVERLESS_FUNCTION:
        current = m.FUNCTION_BASE * traffic
        return current, current * m.FUNCTION_RATIO

    if model == ComputeModel.CONTAINER_CLUSTER:
        nodes = record.compute_count or m.CLUSTER_DEFAULT_COUNT
        current = m.CLUSTER_CONTROL_PLANE + nodes * m.CLUSTER_NODE_UNIT * traffic
        return current, current * m.CLUSTER_RATIO

    return 0.0, 0.0


def _database_cost(record: ArchitectureRecord, traffic: float) -> tuple[float, float]:
    """Return (current, optimized) database cost."""
    kind = record.database_type
    m = CostModel

    if kind == DatabaseKind.RELATIONAL_MANAGED:
        current = m.RELATIONAL_MULTI_AZ if record.database_multi_az else m.RELATIONAL_SINGLE_AZ
        current += record.database_replicas * m.RELATIONAL_REPLICA
        ratio = m.RELATIONAL_RESERVED_RATIO if record.reserved_instances else m.RELATIONAL_DEFAULT_RATIO
        return current, current * ratio

    if kind == DatabaseKind.RELATIONAL_DISTRIBUTED:
        current = m.DISTRIBUTED_MULTI_AZ if record.database_multi_az else m.DISTRIBUTED_SINGLE_AZ
        return current, current * m.DISTRIBUTED_RATIO

    if kind == DatabaseKind.KEY_VALUE_MANAGED:
        current = m.KEY_VALUE_BASE * traffic
        return current, current * m.KEY_VALUE_RATIO

    return 0.0, 0.0


def _flat_costs(record: ArchitectureRecord) -> list[FlatCost]:
    """Optional feature lines, in breakdown order."""
    lines = []
    if record.caching_layer.value != "none":
        lines.append(CostModel.CACHING)
    if record.load_balancer == LoadBalancerKind.APPLICATION:
        lines.append(CostModel.APPLICATION_LOAD_BALANCER)
    elif record.load_balancer == LoadBalancerKind.NETWORK:
        lines.append(CostModel.NETWORK_LOAD_BALANCER)
    if record.cdn.value != "none":
        lines.append(CostModel.CDN)
    if record.monitoring.value != "none":
        lines.append(CostModel.MONITORING)
    if record.waf:
        lines.append(CostModel.WAF)
    return lines


def region_multiplier(record: ArchitectureRecord, simulation: Optional[SimulationParameters] = None) -> float:
    """Cost multiplier for the regional footprint."""
    base = MULTI_REGION_MULTIPLIER if record.multi_region else 1.0
    added = simulation.add_regions if simulation is not None else 0
    return base + added * ADDED_REGION_INCREMENT


def build_breakdown(
    record: ArchitectureRecord,
    simulation: Optional[SimulationParameters] = None,
) -> list[CostBreakdownLine]:
    """Single-region cost lines, rounded at emission."""
    traffic = simulation.traffic_multiplier if simulation is not None else 1.0
    breakdown: list[CostBreakdownLine] = []

    current, optimized = _compute_cost(record, traffic)
    breakdown.append(CostBreakdownLine(
        category="Compute",
        current=round_half_up(current),
        optimized=round_half_up(optimized),
    ))

    current, optimized = _database_cost(record, traffic)
    if current > 0:
        breakdown.append(CostBreakdownLine(
            category="Database",
            current=round_half_up(current),
            optimized=round_half_up(optimized),
        ))

    for flat in _flat_costs(record):
        scale = traffic if flat.scales_with_traffic else 1.0
        breakdown.append(CostBreakdownLine(
            category=flat.category,
            current=round_half_up(flat.current * scale),
            optimized=round_half_up(flat.optimized * scale),
        ))

    return breakdown


def analyze_costs(
    record: ArchitectureRecord,
    simulation: Optional[SimulationParameters] = None,
) -> CostAnalysis:
    """Project monthly current and optimized cost for an effective record.

    The region multiplier applies to every line and to the totals. A cost
    target below the optimized total clamps the optimized total only; the
    per-line optimized figures are left as computed.

    Args:
        record: Effective architecture record (simulation already applied)
        simulation: Parameters supplying traffic, added regions and cost target

    Returns:
        Cost analysis whose totals satisfy current - savings == optimized
    """
    lines = build_breakdown(record, simulation)
    multiplier = region_multiplier(record, simulation)

    total_current = round_half_up(sum(line.current for line in lines) * multiplier)
    total_optimized = round_half_up(sum(line.optimized for line in lines) * multiplier)

    target_applied = False
    if simulation is not None and simulation.has_cost_target and simulation.cost_target < total_optimized:
        total_optimized = round_half_up(simulation.cost_target)
        target_applied = True

    breakdown = [
        CostBreakdownLine(
            category=line.category,
            current=round_half_up(line.current * multiplier),
            optimized=round_half_up(line.optimized * multiplier),
        )
        for line in lines
    ]

    logger.debug(
        "Cost projection: current=%d optimized=%d multiplier=%.2f target_applied=%s",
        total_current, total_optimized, multiplier, target_applied,
    )

    return CostAnalysis(
        total_current=total_current,
        total_optimized=total_optimized,
        monthly_savings=total_current - total_optimized,
        breakdown=breakdown,
        region_multiplier=multiplier,
        cost_target_applied=target_applied,
    )
