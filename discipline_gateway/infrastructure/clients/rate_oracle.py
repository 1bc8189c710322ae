"""HTTP price oracle client implementing the RateProvider interface"""

from datetime import datetime

import httpx

from discipline_gateway.config import settings
from discipline_gateway.domain.exceptions import RateOracleError


class OracleRateProvider:
    """Fetches stablecoin-to-fiat rates from an external price service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url or settings.rate_oracle_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def rate(self, timestamp: datetime, currency: str) -> float:
        """
        Rate for one stablecoin unit in `currency` at `timestamp`.

        Raises:
            RateOracleError: On timeout, HTTP errors, or invalid response
        """
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = client.get(
                    "/v1/rates",
                    params={"timestamp": timestamp.isoformat(), "currency": currency.upper()},
                )
                response.raise_for_status()
                return float(response.json()["rate"])

        except httpx.TimeoutException as e:
            raise RateOracleError(f"Rate oracle timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise RateOracleError(f"Rate oracle error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise RateOracleError(f"Rate oracle unreachable: {e}") from e
        except (KeyError, ValueError, TypeError) as e:
            raise RateOracleError(f"Invalid rate data from oracle: {e}") from e
