"""Tests for ExperienceLevelPolicy."""

import pytest

from appeal_engine.domain.policies.experience_level import earned_level, promoted_level


@pytest.mark.parametrize(
    "successful,total,expected",
    [
        (4, 4, 1),     # too few resolutions
        (3, 5, 2),     # 0.6 at 5
        (2, 5, 1),     # 0.4 at 5
        (7, 10, 3),
        (12, 15, 4),
        (18, 20, 5),
        (17, 20, 4),   # 0.85 at 20: misses level 5, meets level 4
        (10, 20, 1),   # 0.5 meets nothing
    ],
)
def test_earned_level_thresholds(successful, total, expected):
    assert earned_level(successful, total) == expected


def test_promoted_level_unchanged_below_five_resolutions():
    assert promoted_level(3, 4, 4) == 3
    assert promoted_level(1, 4, 4) == 1


def test_promoted_level_never_demotes():
    """A manually granted level survives a weak record."""
    assert promoted_level(4, 1, 10) == 4


def test_promoted_level_promotes():
    assert promoted_level(1, 9, 10) == 3
