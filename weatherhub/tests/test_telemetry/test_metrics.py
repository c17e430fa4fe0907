"""Tests for Prometheus metrics recording."""

from unittest.mock import patch

from weatherhub.telemetry.metrics import HubMetrics


class TestHubMetrics:
    def test_counters(self):
        metrics = HubMetrics()
        metrics.record_hit("zones")
        metrics.record_hit("zones")
        metrics.record_miss("forecast")
        metrics.record_request()
        metrics.record_failure()
        metrics.record_duration(0.42)

        assert metrics.value("weatherhub_cache_hit_total", {"entry": "zones"}) == 2
        assert metrics.value("weatherhub_cache_miss_total", {"entry": "forecast"}) == 1
        assert metrics.value("weatherhub_forecast_requests_total") == 1
        assert metrics.value("weatherhub_forecast_failures_total") == 1
        assert metrics.value("weatherhub_forecast_request_duration_seconds_sum") == 0.42

    def test_instances_do_not_share_registry(self):
        a = HubMetrics()
        b = HubMetrics()
        a.record_request()
        assert b.value("weatherhub_forecast_requests_total") == 0

    def test_render(self):
        metrics = HubMetrics()
        metrics.record_miss("zones")
        text = metrics.render().decode()
        assert 'weatherhub_cache_miss_total{entry="zones"} 1.0' in text
        assert "weatherhub_forecast_request_duration_seconds_bucket" in text

    def test_recording_errors_are_swallowed(self):
        metrics = HubMetrics()
        with patch.object(metrics.forecast_requests, "inc", side_effect=RuntimeError("boom")):
            metrics.record_request()
