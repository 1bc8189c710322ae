"""Unit tests for the synthetic rate model and rate cache"""

import pytest
from datetime import datetime, timezone
from discipline_gateway.domain.rates import (
    CachedRateProvider,
    SyntheticRateModel,
    days_since_epoch,
)

MOMENT = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class CountingProvider:
    def __init__(self):
        self.calls = 0

    def rate(self, timestamp, currency):
        self.calls += 1
        return 1.0


def test_days_since_epoch():
    assert days_since_epoch(datetime(2024, 1, 1, tzinfo=timezone.utc)) == 0
    assert days_since_epoch(datetime(2024, 1, 11, 23, 59, tzinfo=timezone.utc)) == 10
    assert days_since_epoch(datetime(2023, 12, 31, 12, tzinfo=timezone.utc)) == -1


def test_usd_rate_stays_near_peg():
    """Oscillation plus jitter never leaves the +/-0.25% band"""
    model = SyntheticRateModel(seed=1)
    for day in range(1, 29):
        rate = model.rate(datetime(2024, 2, day, tzinfo=timezone.utc), "USD")
        assert 0.9975 <= rate <= 1.0025


def test_eur_rate_scaled_by_fx():
    model = SyntheticRateModel(seed=1)
    rate = model.rate(MOMENT, "EUR")
    assert 0.89 <= rate <= 0.95


def test_no_jitter_is_exact():
    """At the epoch sin(0) is 0, so USD is exactly the peg and EUR exactly the base"""
    model = SyntheticRateModel(jitter=0.0)
    epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert model.rate(epoch, "USD") == 1.0
    assert model.rate(epoch, "EUR") == pytest.approx(0.92)


def test_seeded_model_is_reproducible():
    first = SyntheticRateModel(seed=7)
    second = SyntheticRateModel(seed=7)

    assert first.rate(MOMENT, "USD") == second.rate(MOMENT, "USD")
    assert first.rate(MOMENT, "USD") == first.rate(MOMENT, "USD")


def test_different_seeds_differ():
    assert SyntheticRateModel(seed=1).rate(MOMENT, "USD") != SyntheticRateModel(seed=2).rate(MOMENT, "USD")


def test_unknown_currency_priced_as_usd():
    model = SyntheticRateModel(seed=3)
    assert model.rate(MOMENT, "GBP") == model.rate(MOMENT, "USD")


def test_cache_hits_skip_provider():
    inner = CountingProvider()
    cache = CachedRateProvider(inner, max_size=10)

    cache.rate(MOMENT, "USD")
    cache.rate(MOMENT, "usd")

    assert inner.calls == 1
    assert len(cache) == 1


def test_cache_evicts_least_recently_used():
    inner = CountingProvider()
    cache = CachedRateProvider(inner, max_size=2)
    a = datetime(2024, 1, 1, tzinfo=timezone.utc)
    b = datetime(2024, 1, 2, tzinfo=timezone.utc)
    c = datetime(2024, 1, 3, tzinfo=timezone.utc)

    cache.rate(a, "USD")
    cache.rate(b, "USD")
    cache.rate(a, "USD")  # a is now most recent
    cache.rate(c, "USD")  # evicts b

    assert len(cache) == 2
    assert inner.calls == 3

    cache.rate(a, "USD")
    assert inner.calls == 3
    cache.rate(b, "USD")
    assert inner.calls == 4


def test_cache_makes_unseeded_model_stable():
    """Same key returns the same rate even when the underlying model is random"""
    cache = CachedRateProvider(SyntheticRateModel())
    assert cache.rate(MOMENT, "USD") == cache.rate(MOMENT, "USD")
