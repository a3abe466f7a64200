"""Tests for metric math utilities."""

import pytest

from cfc_monitoring.metrics.math_utils import mean, percent_change, percentile


class TestMean:
    def test_empty(self):
        assert mean([]) == 0.0

    def test_values(self):
        assert mean([1.0, 2.0, 6.0]) == 3.0


class TestPercentile:
    """Tests for interpolated percentiles."""

    def test_empty_returns_zero(self):
        assert percentile([], 95) == 0.0

    def test_single_value(self):
        assert percentile([42.0], 99) == 42.0

    def test_bounds_are_min_and_max(self):
        data = [5.0, 1.0, 3.0]
        assert percentile(data, 0) == 1.0
        assert percentile(data, 100) == 5.0

    def test_median_interpolates(self):
        assert percentile([1.0, 2.0, 3.0, 4.0], 50) == pytest.approx(2.5)

    def test_p95_of_one_to_hundred(self):
        data = [float(i) for i in range(1, 101)]
        assert percentile(data, 95) == pytest.approx(95.05)

    @pytest.mark.parametrize("p", [-1, 100.5])
    def test_out_of_range(self, p):
        with pytest.raises(ValueError):
            percentile([1.0], p)


class TestPercentChange:
    def test_increase(self):
        assert percent_change(100.0, 150.0) == pytest.approx(50.0)

    def test_decrease(self):
        assert percent_change(200.0, 100.0) == pytest.approx(-50.0)

    def test_zero_base(self):
        assert percent_change(0.0, 10.0) == 0.0
