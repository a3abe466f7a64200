"""Tests for host resource sampling."""

from types import SimpleNamespace
from unittest.mock import patch

from cfc_monitoring.metrics.resources import ResourceSampler


class TestResourceSampler:
    """Tests for ResourceSampler.sample()."""

    def test_reads_psutil(self, clock):
        with patch("cfc_monitoring.metrics.resources.psutil") as mock_psutil:
            mock_psutil.cpu_percent.return_value = 37.5
            mock_psutil.virtual_memory.return_value = SimpleNamespace(percent=61.0)
            mock_psutil.disk_usage.return_value = SimpleNamespace(percent=80.0)

            snapshot = ResourceSampler(disk_path="/data", clock=clock).sample()

        assert snapshot.cpu_percent == 37.5
        assert snapshot.memory_percent == 61.0
        assert snapshot.disk_percent == 80.0
        assert snapshot.sampled_at == clock.now
        mock_psutil.disk_usage.assert_called_with("/data")

    def test_unreadable_disk_reports_zero(self, clock):
        with patch("cfc_monitoring.metrics.resources.psutil") as mock_psutil:
            mock_psutil.cpu_percent.return_value = 1.0
            mock_psutil.virtual_memory.return_value = SimpleNamespace(percent=2.0)
            mock_psutil.disk_usage.side_effect = FileNotFoundError("/missing")

            snapshot = ResourceSampler(disk_path="/missing", clock=clock).sample()

        assert snapshot.disk_percent == 0.0
        assert snapshot.cpu_percent == 1.0
