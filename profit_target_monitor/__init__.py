"""Profit Target Monitor - Portfolio Take-Profit Watcher

Polls current prices for a static portfolio and reports each profit
target exactly once as soon as the market reaches it.

No orders are placed. The job is telling you when to sell.
"""

__version__ = "0.1.0"
