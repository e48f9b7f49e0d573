"""Data models for Profit Target Monitor."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterator, NamedTuple, Optional, Set, Tuple


@dataclass(frozen=True)
class Target:
    """One take-profit threshold for a holding."""
    level: int
    price: Decimal
    percentage: Decimal
    description: str = ""


@dataclass(frozen=True)
class Holding:
    """A tracked asset, the quantity owned and its profit targets."""
    symbol: str
    name: str
    quantity: Decimal
    targets: Tuple[Target, ...] = ()

    # Identifier the price source knows this asset by (e.g. "ethereum")
    quote_id: Optional[str] = None

    def sell_quantity(self, target: Target) -> Decimal:
        """Quantity to sell when ``target`` is reached."""
        return self.quantity * target.percentage / 100


class AlertKey(NamedTuple):
    """Stable identity of a target: (symbol, level, trigger price)."""
    symbol: str
    level: int
    price: Decimal

    @classmethod
    def for_target(cls, holding: Holding, target: Target) -> "AlertKey":
        return cls(holding.symbol, target.level, target.price)

    def __str__(self) -> str:
        return f"{self.symbol}-{self.level}-{self.price}"


class TriggerHistory:
    """Targets already reported during this process lifetime.

    Append-only: a key, once recorded, is never removed, so the same
    target cannot fire twice even if the price dips and crosses again.
    """

    def __init__(self):
        self._keys: Set[AlertKey] = set()

    def __contains__(self, key: AlertKey) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[AlertKey]:
        return iter(sorted(self._keys, key=str))

    def record(self, key: AlertKey) -> None:
        self._keys.add(key)


@dataclass
class PriceSnapshot:
    """Current prices as of one scheduler tick.

    A symbol without a usable price is simply absent (or None), which is
    different from a price of zero.
    """
    prices: Dict[str, Optional[Decimal]] = field(default_factory=dict)
    changes_24h: Dict[str, Decimal] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def empty(cls) -> "PriceSnapshot":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not any(self.price_for(symbol) is not None for symbol in self.prices)

    def price_for(self, symbol: str) -> Optional[Decimal]:
        """Price for ``symbol``, or None when the source had no usable data."""
        price = self.prices.get(symbol)
        if price is None or not price.is_finite():
            return None
        return price


@dataclass
class ProfitAlert:
    """A profit target that has just been reached."""
    timestamp: datetime
    symbol: str
    name: str
    current_price: Decimal
    target_level: int
    target_price: Decimal
    target_description: str
    sell_percentage: Decimal
    sell_quantity: Decimal
    proceeds: Decimal

    @property
    def key(self) -> AlertKey:
        return AlertKey(self.symbol, self.target_level, self.target_price)

    def format_message(self) -> str:
        """Format alert message for delivery."""
        lines = [
            f"🚀 PROFIT ALERT: {self.name} ({self.symbol}) reached ${self.current_price:.4f}!",
            "",
            f"Target: {self.target_description}",
            f"Action: Sell {self.sell_percentage}% of position "
            f"({self.sell_quantity:.4f} {self.symbol})",
            f"Profit Value: ${self.proceeds:.2f}",
        ]
        return "\n".join(lines)

    def to_payload(self, email: str = "") -> Dict[str, Any]:
        """JSON body accepted by the notification sink."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "coin": self.symbol,
            "coinName": self.name,
            "currentPrice": float(self.current_price),
            "targetPrice": float(self.target_price),
            "targetLevel": self.target_level,
            "targetDescription": self.target_description,
            "sellPercentage": float(self.sell_percentage),
            "sellQuantity": float(self.sell_quantity),
            "profitValue": float(self.proceeds),
            "message": self.format_message(),
            "email": email,
        }
