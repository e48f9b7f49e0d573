"""Target evaluation: which profit targets the current prices have reached."""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .models import AlertKey, Holding, PriceSnapshot, ProfitAlert, TriggerHistory

logger = logging.getLogger(__name__)


def evaluate(
    snapshot: PriceSnapshot,
    portfolio: Sequence[Holding],
    history: TriggerHistory,
    now: Optional[datetime] = None,
) -> List[ProfitAlert]:
    """Return an alert for every target newly reached in ``snapshot``.

    A target is reached when the current price is at or above its trigger
    price. Each reached target is recorded in ``history`` as soon as its
    alert is built, so it never fires again for the lifetime of the
    history. Holdings without a usable price are skipped.

    Alerts come back in portfolio order, then target order.
    """
    timestamp = now or datetime.now(timezone.utc)
    alerts: List[ProfitAlert] = []

    for holding in portfolio:
        current_price = snapshot.price_for(holding.symbol)
        if current_price is None:
            logger.debug(f"{holding.symbol}: no price available, skipping")
            continue

        for target in holding.targets:
            if current_price < target.price:
                continue

            key = AlertKey.for_target(holding, target)
            if key in history:
                continue

            sell_quantity = holding.sell_quantity(target)
            alert = ProfitAlert(
                timestamp=timestamp,
                symbol=holding.symbol,
                name=holding.name,
                current_price=current_price,
                target_level=target.level,
                target_price=target.price,
                target_description=target.description,
                sell_percentage=target.percentage,
                sell_quantity=sell_quantity,
                proceeds=sell_quantity * current_price,
            )
            history.record(key)
            alerts.append(alert)

            logger.info(
                f"PROFIT TARGET HIT: {holding.symbol} reached ${current_price} "
                f"(Target {target.level}: ${target.price})"
            )

    return alerts
