"""Price client for current quotes from the CoinGecko simple price API."""

import logging
import math
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .config import settings
from .models import Holding, PriceSnapshot

logger = logging.getLogger(__name__)


class PriceClient:
    """Fetches a price snapshot for every holding in the portfolio."""

    def __init__(
        self,
        portfolio: Sequence[Holding],
        api_url: Optional[str] = None,
        currency: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.portfolio = list(portfolio)
        self.api_url = api_url or settings.price_api_url
        self.currency = (currency or settings.quote_currency).lower()
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self._transport = transport

    @property
    def quote_ids(self) -> Dict[str, List[str]]:
        """Map of price source id -> every portfolio symbol quoted by it."""
        ids: Dict[str, List[str]] = {}
        for h in self.portfolio:
            ids.setdefault(h.quote_id or h.symbol.lower(), []).append(h.symbol)
        return ids

    def fetch(self) -> PriceSnapshot:
        """Fetch current prices.

        Returns:
            PriceSnapshot with a price for each symbol the source reported.
            An empty snapshot if the request failed for any reason.
        """
        ids = self.quote_ids
        if not ids:
            return PriceSnapshot.empty()

        logger.info("Fetching prices...")

        try:
            with httpx.Client(transport=self._transport, timeout=self.timeout) as client:
                response = client.get(
                    self.api_url,
                    params={
                        "ids": ",".join(ids),
                        "vs_currencies": self.currency,
                        "include_24hr_change": "true",
                    },
                )
                response.raise_for_status()
                data = response.json(parse_float=Decimal)
        except Exception as e:
            logger.error(f"Error fetching prices: {e}")
            return PriceSnapshot.empty()

        if not isinstance(data, dict):
            logger.error(f"Unexpected price response: {type(data).__name__}")
            return PriceSnapshot.empty()

        snapshot = self._parse(data, ids)
        logger.info(
            "Current prices: "
            + ", ".join(f"{symbol}={price}" for symbol, price in snapshot.prices.items())
        )
        return snapshot

    def _parse(self, data: Dict[str, Any], ids: Dict[str, List[str]]) -> PriceSnapshot:
        snapshot = PriceSnapshot()
        change_field = f"{self.currency}_24h_change"

        for quote_id, symbols in ids.items():
            entry = data.get(quote_id)
            if not isinstance(entry, dict):
                logger.debug(f"{'/'.join(symbols)}: no quote for '{quote_id}' in response")
                continue

            price = _to_decimal(entry.get(self.currency))
            if price is None:
                if entry.get(self.currency) is not None:
                    logger.warning(f"{'/'.join(symbols)}: unusable price {entry.get(self.currency)!r}")
                continue
            change = _to_decimal(entry.get(change_field))

            for symbol in symbols:
                snapshot.prices[symbol] = price
                if change is not None:
                    snapshot.changes_24h[symbol] = change

        return snapshot


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Convert a JSON number to Decimal; None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # json.loads hands back NaN/Infinity literals as floats
        return Decimal(str(value)) if math.isfinite(value) else None
    return None
