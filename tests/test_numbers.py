import pytest

from skillsynth.utils import clamp, coerce_score, round_half_up


@pytest.mark.parametrize("value, expected", [
    (70.5, 71), (70.49, 70), (0.5, 1), (-0.5, 0),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_clamp():
    assert clamp(120, 0, 100) == 100
    assert clamp(-3, 0, 100) == 0


@pytest.mark.parametrize("value, expected", [
    (85, 85), ("72", 72), (64.5, 65), (140, 100), (-10, 0), (10 ** 400, 100),
])
def test_coerce_score(value, expected):
    assert coerce_score(value) == expected


@pytest.mark.parametrize("value", [
    float("inf"), float("-inf"), float("nan"), "Infinity", "high", None, True, [80],
])
def test_coerce_score_rejects_non_numbers(value):
    assert coerce_score(value) is None
    assert coerce_score(value, default=0) == 0
