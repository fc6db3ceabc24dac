import math

import pytest

from packetrate.statistics import Max, Mean, Min, Stdev, Sum


@pytest.mark.parametrize('statistic', [Min, Max, Mean, Stdev, Sum])
def test_result_is_nan_before_any_update(statistic):
    assert math.isnan(statistic().result())


def test_single_sample_mean_and_stdev():
    mean, stdev = Mean(), Stdev()
    mean.update(7.5)
    stdev.update(7.5)

    assert mean.result() == 7.5
    assert stdev.result() == 0.0


def test_min_max_track_extremes():
    low, high = Min(), Max()
    for sample in (3.0, 1.0, 4.0, 1.5, 9.0, 2.6):
        low.update(sample)
        high.update(sample)

    assert low.result() == 1.0
    assert high.result() == 9.0


def test_max_handles_all_negative_samples():
    high = Max()
    for sample in (-5.0, -2.0, -7.0):
        high.update(sample)

    assert high.result() == -2.0


def test_stdev_is_population_stdev():
    stdev = Stdev()
    for sample in (2, 4, 4, 4, 5, 5, 7, 9):
        stdev.update(sample)

    assert stdev.result() == pytest.approx(2.0)


def test_stdev_never_negative_under_cancellation():
    stdev = Stdev()
    for _ in range(1000):
        stdev.update(0.1)

    result = stdev.result()
    assert result >= 0.0
    assert result == pytest.approx(0.0, abs=1e-6)


def test_sum_and_count():
    total = Sum()
    for sample in (1, 2, 3.5):
        total.update(sample)

    assert total.result() == 6.5
    assert total.count == 3
