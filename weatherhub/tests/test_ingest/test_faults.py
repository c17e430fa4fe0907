"""Tests for the opt-in fault injector."""

import pytest

from weatherhub.errors import InjectedFaultError, UnexpectedError
from weatherhub.ingest.faults import FaultInjector


class TestFaultInjector:
    def test_disabled_by_default(self):
        faults = FaultInjector()
        for _ in range(20):
            faults.check("fetch_forecast")

    def test_every_fifth_call(self):
        faults = FaultInjector(every_n=5, enabled=True)
        outcomes = []
        for _ in range(10):
            try:
                faults.check("fetch_forecast")
                outcomes.append("ok")
            except InjectedFaultError:
                outcomes.append("fault")
        assert outcomes == ["ok"] * 4 + ["fault"] + ["ok"] * 4 + ["fault"]

    def test_injected_fault_is_unexpected(self):
        faults = FaultInjector(every_n=1, enabled=True)
        with pytest.raises(UnexpectedError):
            faults.check("fetch_forecast")

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            FaultInjector(every_n=0)
