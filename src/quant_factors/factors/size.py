"""
Size factors: market capitalization and its logarithm.
"""

import numpy as np

from ..base import DataFrequency, Factor, FactorCategory


class MarketCap(Factor):
    name = "market_cap"
    description = "Raw market capitalization (price × shares outstanding)"
    category = FactorCategory.SIZE
    required_columns = ("symbol", "date", "close", "shares_outstanding")
    frequency = DataFrequency.DAILY

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        return self.finish(history, as_of_date, history["close"] * history["shares_outstanding"])


class LogMarketCap(Factor):
    """ln(close × shares_outstanding); non-positive caps are dropped."""

    name = "log_market_cap"
    description = "Natural logarithm of market capitalization (price × shares outstanding)"
    category = FactorCategory.SIZE
    required_columns = ("symbol", "date", "close", "shares_outstanding")
    frequency = DataFrequency.DAILY

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        cap = history["close"] * history["shares_outstanding"]
        values = np.log(cap.where(cap > 0))
        return self.finish(history, as_of_date, values)
