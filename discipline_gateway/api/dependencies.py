"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from discipline_gateway.config import Settings, settings
from discipline_gateway.domain.rates import CachedRateProvider, RateProvider, SyntheticRateModel
from discipline_gateway.infrastructure.clients.rate_oracle import OracleRateProvider
from discipline_gateway.infrastructure.clients.transfers import AlchemyTransferClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_transfer_client() -> AlchemyTransferClient:
    """Provide transfer source client instance"""
    return AlchemyTransferClient()


def build_rate_provider(config: Settings) -> RateProvider:
    """Rate source selected by RATE_PROVIDER, behind a per-request LRU cache"""
    if config.rate_provider == "oracle":
        provider: RateProvider = OracleRateProvider(base_url=config.rate_oracle_url)
    else:
        provider = SyntheticRateModel(seed=config.rate_seed)
    return CachedRateProvider(provider, max_size=config.rate_cache_size)


def get_rate_provider() -> RateProvider:
    """Provide the configured exchange rate source"""
    return build_rate_provider(settings)
