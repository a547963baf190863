"""Tests for day resampling and fan-chart percentile bands."""
import numpy as np
import pytest

from monte_carlo import run_simulations
from percentiles import (
    DEFAULT_FAN_PERCENTILES,
    compute_fan_series,
    compute_fan_series_legacy,
    percentile_at,
    resample_daily,
)


class TestPercentileAt:

    def test_exact_and_interpolated_ranks(self):
        values = [10.0, 20.0, 30.0, 40.0, 50.0]
        assert percentile_at(values, 0) == 10.0
        assert percentile_at(values, 50) == 30.0
        assert percentile_at(values, 100) == 50.0
        assert percentile_at(values, 10) == pytest.approx(14.0)

    def test_empty(self):
        assert percentile_at([], 50) == 0.0


class TestResampleDaily:

    def test_picks_day_boundaries(self):
        assert resample_daily([list(range(7))], days=3, trades_per_day=2) == [[0.0, 2.0, 4.0, 6.0]]

    def test_short_series_clamps_to_last(self):
        assert resample_daily([(1.0, 2.0, 3.0)], days=3, trades_per_day=2) == [[1.0, 3.0, 3.0, 3.0]]

    def test_accepts_simulation_paths(self, seeded_params):
        paths = run_simulations(seeded_params)
        daily = resample_daily(paths, seeded_params.days, seeded_params.trades_per_day)
        assert len(daily) == len(paths)
        assert all(len(row) == seeded_params.days + 1 for row in daily)
        assert daily[0][-1] == paths[0].final_balance
        assert daily[0][1] == paths[0].balances[seeded_params.trades_per_day]

    def test_empty_series_rejected(self):
        with pytest.raises(ValueError):
            resample_daily([[]], days=1, trades_per_day=1)


class TestComputeFanSeries:

    def test_bands_and_mean(self):
        series = [[20.0, 30.0], [0.0, 10.0], [10.0, 20.0]]
        fan = compute_fan_series(series, [25, 50])
        assert fan.x == [0, 1]
        assert fan.bands[25] == pytest.approx([5.0, 15.0])
        assert fan.bands[50] == pytest.approx([10.0, 20.0])
        assert fan.center_line == fan.bands[50]
        assert fan.mean_series == pytest.approx([10.0, 20.0])

    def test_default_percentiles(self):
        fan = compute_fan_series([[1.0, 2.0], [3.0, 4.0]])
        assert sorted(fan.bands) == sorted(float(p) for p in DEFAULT_FAN_PERCENTILES)
        for lower, upper in zip(DEFAULT_FAN_PERCENTILES, DEFAULT_FAN_PERCENTILES[1:]):
            assert all(a <= b for a, b in zip(fan.bands[lower], fan.bands[upper]))

    def test_identical_paths_round_trip(self, seeded_params):
        path = run_simulations(seeded_params)[0]
        daily = resample_daily([path], seeded_params.days, seeded_params.trades_per_day)[0]
        fan = compute_fan_series([daily] * 9, [50])
        assert fan.center_line == daily

    def test_center_line_without_median(self):
        fan = compute_fan_series([[1.0, 2.0, 3.0]], [5, 95])
        assert fan.center_line == [0.0, 0.0, 0.0]
        assert fan.center("mean") == fan.mean_series

    def test_empty_input(self):
        fan = compute_fan_series([], [5, 50])
        assert fan.x == []
        assert fan.bands == {5.0: [], 50.0: []}
        assert fan.center_line == []

    def test_ragged_input_rejected(self):
        with pytest.raises(ValueError):
            compute_fan_series([[1.0, 2.0], [1.0]])

    def test_input_not_mutated(self):
        series = [[3.0, 1.0], [1.0, 3.0]]
        compute_fan_series(series, [50])
        assert series == [[3.0, 1.0], [1.0, 3.0]]

    def test_float_array_input_not_sorted_in_place(self):
        series = np.array([[3.0, 1.0], [1.0, 3.0]])
        fan = compute_fan_series(series, [0, 50, 100])
        assert series.tolist() == [[3.0, 1.0], [1.0, 3.0]]
        assert fan.bands[0] == [1.0, 1.0]
        assert fan.bands[100] == [3.0, 3.0]

    @pytest.mark.parametrize("p", [-50, -0.1, 100.5, 150])
    def test_percentile_out_of_range_rejected(self, p):
        with pytest.raises(ValueError):
            compute_fan_series([[1.0], [2.0]], [50, p])
        with pytest.raises(ValueError):
            compute_fan_series([], [p])

    def test_legacy_bands(self):
        series = [[float(v), float(v) * 2] for v in range(5)]
        fan = compute_fan_series_legacy(series)
        assert fan.p50 == pytest.approx([2.0, 4.0])
        assert fan.p25 == pytest.approx([1.0, 2.0])
        assert fan.p5 == pytest.approx([0.2, 0.4])
        assert fan.p95 == pytest.approx([3.8, 7.6])
