"""
Project Risk Engine - Projections.

Straight-line estimates of final cost, final margin and
completion date from a single snapshot. Cost per percent of
progress and progress per day are assumed constant; no
smoothing or history is used, so early-stage projects swing
widely.
"""

import logging
from datetime import timedelta
from typing import Optional

from .clock import Clock, get_default_clock
from .formatting import round_half_up
from .types import ProjectionResult, ProjectSnapshot


logger = logging.getLogger(__name__)


SECONDS_PER_DAY = 86_400


def calculate_projections(
    snapshot: ProjectSnapshot,
    clock: Optional[Clock] = None,
) -> ProjectionResult:
    """
    Project end-of-job cost, margin and completion date.

    Args:
        snapshot: Project metrics
        clock: Time source for the completion date

    Returns:
        ProjectionResult; every estimate is None when the project
        has no recorded progress, and the completion date is None
        when it falls outside the representable date range
    """
    progress = snapshot.actual_progress
    if not progress or progress <= 0:
        return ProjectionResult()

    cost_per_percent = snapshot.total_costs / progress
    completion_cost = round_half_up(cost_per_percent * 100)

    contract = snapshot.contract_value
    if contract > 0:
        final_margin = (contract - completion_cost) / contract * 100
    else:
        final_margin = 0

    completion_date = None
    if snapshot.start_date is not None and 0 < progress < 100:
        now = (clock or get_default_clock()).now()
        days_elapsed = max(1, (now - snapshot.start_date).total_seconds() / SECONDS_PER_DAY)
        progress_per_day = progress / days_elapsed
        days_remaining = (100 - progress) / progress_per_day
        try:
            completion_date = now + timedelta(days=days_remaining)
        except OverflowError:
            logger.debug(
                f"Project {snapshot.id}: completion date out of range "
                f"({days_remaining:.0f} days remaining)"
            )

    return ProjectionResult(
        estimated_completion_cost=completion_cost,
        estimated_final_margin=final_margin,
        estimated_completion_date=completion_date,
        cost_per_percent=cost_per_percent,
    )
