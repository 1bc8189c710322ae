"""Alchemy HTTP client for fetching stablecoin transfer history"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from discipline_gateway.config import settings
from discipline_gateway.domain.exceptions import (
    InvalidWalletAddressError,
    TransferSourceError,
    UnsupportedChainError,
)
from discipline_gateway.domain.models import RawContract, RawTransfer
from discipline_gateway.utils.date_utils import parse_timestamp

CHAIN_TO_NETWORK = {
    "ethereum": "eth-mainnet",
    "polygon": "polygon-mainnet",
    "arbitrum": "arb-mainnet",
    "optimism": "opt-mainnet",
    "base": "base-mainnet",
}

# USDC / USDT contracts per chain (Base has no widespread USDT)
STABLECOIN_CONTRACTS = {
    "ethereum": [
        "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
        "0xdac17f958d2ee523a2206206994597c13d831ec7",
    ],
    "polygon": [
        "0x2791bca1f2de4661ed88a30c99a7a9449aa84174",
        "0xc2132d05d31c914a87c6611c10748aeb04b58e8f",
    ],
    "arbitrum": [
        "0xaf88d065e77c8cc2239327c5edb3a432268e5831",
        "0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9",
    ],
    "optimism": [
        "0x0b2c639c533813f4aa9d7837caf62653d097ff85",
        "0x94b008aa00579c1307b0ef2c499ad98a8ce58e58",
    ],
    "base": [
        "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
    ],
}

WALLET_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_supported_chain(chain: str) -> bool:
    return chain in CHAIN_TO_NETWORK


def validate_wallet_address(address: str) -> bool:
    return bool(WALLET_ADDRESS_PATTERN.match(address or ""))


class AlchemyTransferClient:
    """Client for Alchemy's asset transfer API"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        lookback_days: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.alchemy_api_key
        self.base_url = base_url or settings.alchemy_base_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.lookback_days = lookback_days or settings.transfer_lookback_days
        self.transport = transport

    def _endpoint(self, chain: str) -> str:
        return f"{self.base_url.format(network=CHAIN_TO_NETWORK[chain])}/{self.api_key}"

    async def get_stablecoin_transfers(
        self,
        wallet_address: str,
        chain: str,
        now: datetime | None = None,
    ) -> List[RawTransfer]:
        """
        Fetch USDC/USDT transfers to and from a wallet within the look-back window.

        Transfers without a block timestamp are kept. Result is newest first,
        undated transfers last.

        Raises:
            InvalidWalletAddressError: Address is not 0x + 40 hex characters
            UnsupportedChainError: Chain has no configured network
            TransferSourceError: On timeout, HTTP errors, or invalid response
        """
        if not validate_wallet_address(wallet_address):
            raise InvalidWalletAddressError(f"Invalid wallet address format: {wallet_address}")
        if not is_supported_chain(chain):
            raise UnsupportedChainError(f"Unsupported blockchain: {chain}")
        if not self.api_key:
            raise TransferSourceError("ALCHEMY_API_KEY is not configured")

        if now is None:
            now = datetime.now(timezone.utc)
        cutoff = now - timedelta(days=self.lookback_days)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                incoming = await self._fetch_all(client, chain, {"toAddress": wallet_address})
                outgoing = await self._fetch_all(client, chain, {"fromAddress": wallet_address})
                transfers = [_parse_transfer(item) for item in incoming + outgoing]

            except httpx.TimeoutException as e:
                raise TransferSourceError(f"Transfer API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise TransferSourceError(f"Transfer API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise TransferSourceError(f"Transfer API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise TransferSourceError(f"Invalid transfer data from provider: {e}") from e

        recent = [t for t in transfers if t.timestamp is None or parse_timestamp(t.timestamp) >= cutoff]

        dated = sorted(
            (t for t in recent if t.timestamp),
            key=lambda t: parse_timestamp(t.timestamp),
            reverse=True,
        )
        undated = [t for t in recent if not t.timestamp]
        return dated + undated

    async def _fetch_all(
        self,
        client: httpx.AsyncClient,
        chain: str,
        direction: Dict[str, str],
    ) -> List[Dict[str, Any]]:
        """Follow pageKey pagination for one direction of transfers"""
        items: List[Dict[str, Any]] = []
        page_key: Optional[str] = None

        while True:
            params: Dict[str, Any] = {
                "fromBlock": "0x0",
                "toBlock": "latest",
                "category": ["erc20"],
                "contractAddresses": STABLECOIN_CONTRACTS[chain],
                "withMetadata": True,
                "order": "desc",
                **direction,
            }
            if page_key:
                params["pageKey"] = page_key

            response = await client.post(
                self._endpoint(chain),
                json={"jsonrpc": "2.0", "id": 1, "method": "alchemy_getAssetTransfers", "params": [params]},
            )
            response.raise_for_status()
            body = response.json()

            if "error" in body:
                raise TransferSourceError(f"Transfer API error: {body['error'].get('message', body['error'])}")

            result = body["result"]
            items.extend(result.get("transfers", []))
            page_key = result.get("pageKey")
            if not page_key:
                return items


def _parse_transfer(item: Dict[str, Any]) -> RawTransfer:
    raw_contract = item.get("rawContract") or {}
    metadata = item.get("metadata") or {}
    return RawTransfer(
        block_num=item["blockNum"],
        hash=item["hash"],
        from_address=item["from"],
        to_address=item.get("to"),
        value=float(item.get("value") or 0),
        asset=item.get("asset") or "UNKNOWN",
        category=item.get("category", "erc20"),
        raw_contract=RawContract(
            address=raw_contract.get("address"),
            decimal=raw_contract.get("decimal"),
        ),
        timestamp=metadata.get("blockTimestamp"),
    )
