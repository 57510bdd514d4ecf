import pytest

from vx_academy.core.exceptions import ValidationError
from vx_academy.models.enums import ProgressStatus
from vx_academy.services.rollup import (
    block_completion,
    derive_status,
    mean_completion,
    round_half_up,
    validate_percentage,
)


@pytest.mark.parametrize("pct, expected", [
    (0, ProgressStatus.NOT_STARTED),
    (0.01, ProgressStatus.IN_PROGRESS),
    (1, ProgressStatus.IN_PROGRESS),
    (50, ProgressStatus.IN_PROGRESS),
    (99, ProgressStatus.IN_PROGRESS),
    (99.99, ProgressStatus.IN_PROGRESS),
    (100, ProgressStatus.COMPLETED),
])
def test_derive_status_boundaries(pct, expected):
    assert derive_status(pct) == expected


@pytest.mark.parametrize("pct", [-1, 100.5, None])
def test_percentage_out_of_range_is_rejected(pct):
    with pytest.raises(ValidationError) as exc_info:
        validate_percentage(pct)
    assert "completion_percentage" in exc_info.value.errors


def test_missing_children_count_as_zero():
    # One of two units completed, the other never touched
    assert mean_completion([100.0], 2) == 50.0


def test_mean_of_all_children():
    assert mean_completion([100.0, 50.0, 0.0, 50.0], 4) == 50.0


def test_parent_without_children_is_zero():
    assert mean_completion([], 0) == 0.0


def test_more_rows_than_children_is_a_bug():
    with pytest.raises(ValueError):
        mean_completion([10.0, 20.0, 30.0], 2)


def test_block_completion_share():
    assert block_completion(1, 4) == 25.0
    assert block_completion(4, 4) == 100.0
    assert block_completion(0, 0) == 0.0


@pytest.mark.parametrize("value, expected", [(62.5, 63), (87.5, 88), (66.666, 67), (40.4, 40)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
