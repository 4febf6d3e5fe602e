from __future__ import annotations

import pytest

from services.smoothing import smooth


def test_unset_average_is_seeded_by_sample() -> None:
    assert smooth(None, 4.2) == 4.2


def test_fixed_weight_update() -> None:
    assert smooth(10.0, 50.0, window=40) == pytest.approx(10.0 * 39 / 40 + 50.0 / 40)


def test_constant_input_converges_monotonically() -> None:
    average = smooth(None, 2.0)
    previous_gap = abs(average - 12.0)
    for _ in range(500):
        average = smooth(average, 12.0)
        gap = abs(average - 12.0)
        assert gap <= previous_gap
        assert 2.0 <= average <= 12.0
        previous_gap = gap
    assert average == pytest.approx(12.0, abs=1e-3)


def test_average_stays_within_observed_samples() -> None:
    samples = [3.0, 9.5, 1.0, 7.25, 4.0, 8.0]
    average = None
    seen = []
    for sample in samples:
        average = smooth(average, sample)
        seen.append(sample)
        assert min(seen) <= average <= max(seen)


def test_window_must_be_positive() -> None:
    with pytest.raises(ValueError):
        smooth(1.0, 2.0, window=0)
