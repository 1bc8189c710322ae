"""Turns raw transfer records into ordered conversion events"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from discipline_gateway.domain.models import ConversionEvent, MissingTimestampPolicy, RawTransfer
from discipline_gateway.utils.date_utils import parse_timestamp

logger = logging.getLogger(__name__)


def is_conversion(transfer: RawTransfer, wallet_address: str) -> bool:
    """A conversion is stablecoin leaving the tracked wallet to a known recipient"""
    return (
        transfer.from_address.lower() == wallet_address.lower()
        and transfer.to_address is not None
    )


def parse_conversion_events(
    transfers: Iterable[RawTransfer],
    wallet_address: str,
    policy: MissingTimestampPolicy = MissingTimestampPolicy.USE_CURRENT_TIME,
    now: Optional[datetime] = None,
) -> List[ConversionEvent]:
    """
    Extract outbound conversions for a wallet, oldest first.

    Transfers without a timestamp are handled according to `policy`:
    - USE_CURRENT_TIME: stamped with `now`
    - EXCLUDE_EVENT: dropped
    - SORT_LAST: stamped with the later of `now` and the newest dated conversion,
      so they always sort after every dated one

    Args:
        transfers: Raw transfers in any order
        wallet_address: Tracked wallet, compared case-insensitively
        policy: Missing-timestamp handling
        now: Reference time (default: current UTC time)
    """
    if now is None:
        now = datetime.now(timezone.utc)

    dated: List[ConversionEvent] = []
    undated: List[RawTransfer] = []

    for transfer in transfers:
        if not is_conversion(transfer, wallet_address):
            continue
        if transfer.timestamp:
            dated.append(_to_event(transfer, parse_timestamp(transfer.timestamp)))
        else:
            undated.append(transfer)

    if undated:
        logger.debug(
            "Conversions without timestamp",
            extra={"count": len(undated), "policy": policy.value},
        )

    if policy == MissingTimestampPolicy.EXCLUDE_EVENT:
        fallback = None
    elif policy == MissingTimestampPolicy.SORT_LAST:
        latest = max((e.timestamp for e in dated), default=now)
        fallback = max(latest, now)
    else:
        fallback = now

    events = list(dated)
    if fallback is not None:
        events.extend(_to_event(t, fallback) for t in undated)

    # sorted() is stable, so SORT_LAST events keep their input order at the tail
    return sorted(events, key=lambda e: e.timestamp)


def _to_event(transfer: RawTransfer, timestamp: datetime) -> ConversionEvent:
    return ConversionEvent(
        timestamp=timestamp,
        amount=float(transfer.value),
        token=transfer.asset,
        to_address=transfer.to_address,
        hash=transfer.hash,
    )
