"""Portfolio definition: holdings and their profit targets.

The portfolio is static configuration. It is either the built-in
``DEFAULT_PORTFOLIO`` or a JSON file with the same shape::

    [
      {
        "symbol": "ETH",
        "name": "Ethereum",
        "quote_id": "ethereum",
        "quantity": "6.84722883",
        "targets": [
          {"level": 1, "price": "10500", "percentage": 30,
           "description": "First profit target (2.5x)"}
        ]
      }
    ]

Targets do not need to be in ascending order and percentages do not need
to add up to 100.
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from .models import Holding, Target

logger = logging.getLogger(__name__)


class PortfolioError(ValueError):
    """Raised when the portfolio configuration is invalid."""


class TargetSchema(BaseModel):
    level: int
    price: Decimal = Field(gt=0)
    percentage: Decimal = Field(ge=0, le=100)
    description: str = ""


class HoldingSchema(BaseModel):
    symbol: str = Field(min_length=1)
    name: str
    quantity: Decimal = Field(ge=0)
    quote_id: Optional[str] = None
    targets: List[TargetSchema] = Field(default_factory=list)

    @field_validator("targets")
    @classmethod
    def _unique_levels(cls, targets: List[TargetSchema]) -> List[TargetSchema]:
        levels = [t.level for t in targets]
        if len(levels) != len(set(levels)):
            raise ValueError(f"duplicate target levels: {levels}")
        return targets

    def to_holding(self) -> Holding:
        return Holding(
            symbol=self.symbol,
            name=self.name,
            quantity=self.quantity,
            quote_id=self.quote_id or self.symbol.lower(),
            targets=tuple(
                Target(
                    level=t.level,
                    price=t.price,
                    percentage=t.percentage,
                    description=t.description,
                )
                for t in self.targets
            ),
        )


_PortfolioAdapter = TypeAdapter(List[HoldingSchema])


def _three_stage(first: str, second: str, third: str, multiples: List[str]) -> List[Dict[str, Any]]:
    return [
        {"level": 1, "price": first, "percentage": 30,
         "description": f"First profit target ({multiples[0]})"},
        {"level": 2, "price": second, "percentage": 40,
         "description": f"Second profit target ({multiples[1]})"},
        {"level": 3, "price": third, "percentage": 30,
         "description": f"Final profit target ({multiples[2]})"},
    ]


def _full_exit(price: str, multiple: str) -> List[Dict[str, Any]]:
    return [
        {"level": 1, "price": price, "percentage": 100,
         "description": f"Bull run target ({multiple}) - Full position"},
    ]


DEFAULT_PORTFOLIO: List[Dict[str, Any]] = [
    {"symbol": "ETH", "name": "Ethereum", "quote_id": "ethereum", "quantity": "6.84722883",
     "targets": _three_stage("10500", "25200", "33600", ["2.5x", "6.0x", "8.0x"])},
    {"symbol": "SOL", "name": "Solana", "quote_id": "solana", "quantity": "147.26348532",
     "targets": _three_stage("900", "1600", "2200", ["5.0x", "8.8x", "12.1x"])},
    {"symbol": "LINK", "name": "Chainlink", "quote_id": "chainlink", "quantity": "763.90533",
     "targets": _three_stage("67", "112", "134", ["3.0x", "5.0x", "6.0x"])},
    {"symbol": "ADA", "name": "Cardano", "quote_id": "cardano", "quantity": "12189.717104",
     "targets": _three_stage("2.40", "3.20", "4.00", ["3.0x", "4.0x", "5.0x"])},
    {"symbol": "AAVE", "name": "Aave", "quote_id": "aave", "quantity": "8.307386",
     "targets": _three_stage("740", "1230", "1540", ["2.4x", "4.0x", "5.0x"])},
    {"symbol": "XRP", "name": "XRP", "quote_id": "ripple", "quantity": "287.525101",
     "targets": _full_exit("9.50", "3.0x")},
    {"symbol": "THETA", "name": "Theta Network", "quote_id": "theta-token", "quantity": "456.3849",
     "targets": _full_exit("4.30", "5.0x")},
    {"symbol": "VET", "name": "VeChain", "quote_id": "vechain", "quantity": "11087.888",
     "targets": _full_exit("0.10", "4.0x")},
    {"symbol": "DOT", "name": "Polkadot", "quote_id": "polkadot", "quantity": "37.87584",
     "targets": _full_exit("16.00", "4.0x")},
    {"symbol": "ATOM", "name": "Cosmos", "quote_id": "cosmos", "quantity": "17.94921",
     "targets": _full_exit("23.00", "5.0x")},
]


def build_portfolio(data: List[Dict[str, Any]]) -> List[Holding]:
    """Validate raw holding data and build the immutable portfolio."""
    try:
        schemas = _PortfolioAdapter.validate_python(data)
    except ValidationError as e:
        raise PortfolioError(f"Invalid portfolio: {e}") from e

    return _to_holdings(schemas)


def load_portfolio(path: Optional[Union[str, Path]] = None) -> List[Holding]:
    """Load the portfolio from a JSON file, or the built-in one if no path.

    Raises:
        PortfolioError: if the file cannot be read or fails validation
    """
    if path is None:
        return build_portfolio(DEFAULT_PORTFOLIO)

    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise PortfolioError(f"Cannot read portfolio file {path}: {e}") from e

    try:
        schemas = _PortfolioAdapter.validate_json(raw)
    except ValidationError as e:
        raise PortfolioError(f"Invalid portfolio file {path}: {e}") from e

    holdings = _to_holdings(schemas)
    logger.info(f"Loaded {len(holdings)} holdings from {path}")
    return holdings


def _to_holdings(schemas: List[HoldingSchema]) -> List[Holding]:
    symbols = [s.symbol for s in schemas]
    duplicates = sorted({s for s in symbols if symbols.count(s) > 1})
    if duplicates:
        raise PortfolioError(f"Duplicate holding symbols: {duplicates}")
    return [s.to_holding() for s in schemas]
