"""
Stablecoin exchange-rate sources.

The synthetic model is a placeholder for a real price oracle: a smooth
oscillation around the $1.00 peg plus a small random jitter. Its numbers are
not market data and must not be presented as such.
"""

import math
import random
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Optional, Protocol, Tuple

from discipline_gateway.utils.date_utils import SECONDS_PER_DAY

RATE_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

USD_PEG = 1.0
USD_AMPLITUDE = 0.002
USD_ANGULAR_STEP = 0.1  # radians per day, period ~62 days
EUR_BASE = 0.92
EUR_AMPLITUDE = 0.02
EUR_ANGULAR_STEP = 0.05  # period ~126 days
DEFAULT_JITTER = 0.0005


class RateProvider(Protocol):
    """Anything that can price one stablecoin unit in a fiat currency at a moment"""

    def rate(self, timestamp: datetime, currency: str) -> float:
        ...


def days_since_epoch(timestamp: datetime) -> int:
    """Whole days since 2024-01-01 UTC (floored, negative before the epoch)"""
    return math.floor((timestamp - RATE_EPOCH).total_seconds() / SECONDS_PER_DAY)


class SyntheticRateModel:
    """
    Deterministic-shape rate model with injectable randomness.

    Args:
        seed: When set, the jitter for a timestamp is derived from (seed, timestamp),
            so identical inputs always return identical rates. When None, jitter is
            drawn from a private generator and repeated calls differ.
        jitter: Half-width of the uniform jitter added to the USD rate
    """

    def __init__(self, seed: Optional[int] = None, jitter: float = DEFAULT_JITTER):
        self.seed = seed
        self.jitter = jitter
        self._rng = random.Random()

    def _jitter_for(self, timestamp: datetime) -> float:
        if self.jitter == 0:
            return 0.0
        if self.seed is None:
            draw = self._rng.random()
        else:
            draw = random.Random(f"{self.seed}:{timestamp.isoformat()}").random()
        return (draw - 0.5) * 2 * self.jitter

    def usd_rate(self, timestamp: datetime) -> float:
        days = days_since_epoch(timestamp)
        return USD_PEG + math.sin(days * USD_ANGULAR_STEP) * USD_AMPLITUDE + self._jitter_for(timestamp)

    def rate(self, timestamp: datetime, currency: str) -> float:
        usd_rate = self.usd_rate(timestamp)
        if currency.upper() != "EUR":
            # Unknown codes fall back to USD pricing
            return usd_rate
        days = days_since_epoch(timestamp)
        eur_per_usd = EUR_BASE + math.sin(days * EUR_ANGULAR_STEP) * EUR_AMPLITUDE
        return usd_rate * eur_per_usd


class CachedRateProvider:
    """LRU cache in front of another rate provider"""

    def __init__(self, provider: RateProvider, max_size: int = 1024):
        self.provider = provider
        self.max_size = max_size
        self._cache: "OrderedDict[Tuple[datetime, str], float]" = OrderedDict()

    def rate(self, timestamp: datetime, currency: str) -> float:
        key = (timestamp, currency.upper())
        if key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]

        value = self.provider.rate(timestamp, currency)
        self._cache[key] = value
        if len(self._cache) > self.max_size:
            self._cache.popitem(last=False)  # evict least recently used
        return value

    def __len__(self) -> int:
        return len(self._cache)
