"""Simulation Overlay.

Derives the effective architecture record that every scorer and analyzer
runs against. The overlay is applied exactly once per evaluation: the
multi-region rule is idempotent but the traffic rule is not.
"""

from typing import Optional

from .rounding import round_half_up
from .schema import MAX_COUNT, ArchitectureRecord, SimulationParameters

# Users assumed when the record does not state a number
DEFAULT_SIMULATED_USERS = 100


def apply_simulation(
    record: ArchitectureRecord,
    params: Optional[SimulationParameters] = None,
) -> ArchitectureRecord:
    """Apply what-if parameters to a record.

    Args:
        record: The submitted architecture record (never mutated)
        params: Optional simulation parameters

    Returns:
        A record with simulated effects applied, or the input record itself
        when no parameters were given
    """
    if params is None:
        return record

    updates: dict = {}
    if params.add_regions > 0:
        updates["multi_region"] = True
    if params.traffic_multiplier > 1:
        base_users = record.estimated_users or DEFAULT_SIMULATED_USERS
        # model_copy skips validation, so the record bound is applied here
        updates["estimated_users"] = min(round_half_up(base_users * params.traffic_multiplier), MAX_COUNT)

    if not updates:
        return record
    return record.model_copy(update=updates)
