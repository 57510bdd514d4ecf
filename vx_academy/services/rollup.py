"""
Pure progress arithmetic shared by the rollup in crud/progress_crud.py.

A parent's completion is the mean over every child it is expected to have;
children without a progress row count as 0%.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from vx_academy.core.exceptions import ValidationError
from vx_academy.models.enums import ProgressStatus

MIN_PERCENTAGE = 0.0
MAX_PERCENTAGE = 100.0


def validate_percentage(value: float, field: str = "completion_percentage") -> float:
    if value is None or value < MIN_PERCENTAGE or value > MAX_PERCENTAGE:
        raise ValidationError.for_field(field, f"Completion percentage must be between 0 and 100, got {value}.")
    return float(value)


def derive_status(completion_percentage: float) -> ProgressStatus:
    """Maps a percentage to a status: 0 is not started, 100 is completed, anything between is in progress."""
    pct = validate_percentage(completion_percentage)
    if pct >= MAX_PERCENTAGE:
        return ProgressStatus.COMPLETED
    if pct <= MIN_PERCENTAGE:
        return ProgressStatus.NOT_STARTED
    return ProgressStatus.IN_PROGRESS


def mean_completion(child_percentages: Iterable[float], expected_children: int) -> float:
    """
    Mean completion over `expected_children`, treating absent children as 0%.
    A parent with no children reports 0.
    """
    if expected_children <= 0:
        return MIN_PERCENTAGE
    values = list(child_percentages)
    if len(values) > expected_children:
        raise ValueError(f"Got {len(values)} child percentages for {expected_children} expected children")
    total = sum(validate_percentage(v) for v in values)
    return min(MAX_PERCENTAGE, total / expected_children)


def block_completion(completed_blocks: int, total_blocks: int) -> float:
    """Share of a unit's learning blocks that are completed, as a percentage."""
    if total_blocks <= 0:
        return MIN_PERCENTAGE
    return min(MAX_PERCENTAGE, completed_blocks * MAX_PERCENTAGE / total_blocks)


def round_half_up(value: float) -> int:
    # round() uses banker's rounding; scores round .5 up
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
