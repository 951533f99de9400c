"""
tests/test_monitoring.py
Prometheus counters recorded by the quote engine and the booking flow.
"""
import sys
from datetime import date
from pathlib import Path

import pytest
from prometheus_client import REGISTRY

sys.path.insert(0, str(Path(__file__).parent.parent))

from pricing_engine.engine import QuoteEngine
from pricing_engine.errors import InvalidRange
from pricing_engine.models import ChargeRequest, Mode, RateCatalogEntry


def _sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestQuoteMetrics:

    def test_successful_quote_counted(self):
        entry = RateCatalogEntry(mode=Mode.DAILY, active=True, unit_price=5000)
        before = _sample("charter_quote_requests_total", mode="daily", status="ok")
        QuoteEngine().compute_quote(entry, ChargeRequest.daily(date(2024, 6, 1)), 10)
        assert _sample("charter_quote_requests_total", mode="daily", status="ok") == before + 1

    def test_refused_quote_counted_by_error_code(self):
        entry = RateCatalogEntry(mode=Mode.STAY, active=True, unit_price=4000)
        before = _sample("charter_quote_requests_total", mode="stay", status="invalid_range")
        with pytest.raises(InvalidRange):
            QuoteEngine().compute_quote(entry, ChargeRequest.stay(date(2024, 6, 4), date(2024, 6, 1)), 10)
        assert _sample("charter_quote_requests_total", mode="stay", status="invalid_range") == before + 1

    def test_latency_observed(self):
        entry = RateCatalogEntry(mode=Mode.HOURLY, active=True, unit_price=1000)
        before = _sample("charter_quote_duration_seconds_count", mode="hourly")
        QuoteEngine().compute_quote(entry, ChargeRequest.hourly(date(2024, 6, 1), 10, 14), 15)
        assert _sample("charter_quote_duration_seconds_count", mode="hourly") == before + 1
