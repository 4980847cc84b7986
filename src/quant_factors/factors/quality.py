"""
Quality factors: profitability, balance-sheet strength and earnings stability.
"""

from ..base import DataFrequency, Factor, FactorCategory
from ..panel import rolling
from ._ratio import RatioFactor


class Roe(RatioFactor):
    name = "roe"
    description = "Return on Equity - net income divided by shareholders' equity"
    category = FactorCategory.QUALITY
    required_columns = ("symbol", "date", "net_income", "shareholders_equity")
    numerator = "net_income"
    denominator = "shareholders_equity"


class Roa(RatioFactor):
    name = "roa"
    description = "Return on Assets - net income divided by total assets"
    category = FactorCategory.QUALITY
    required_columns = ("symbol", "date", "net_income", "total_assets")
    numerator = "net_income"
    denominator = "total_assets"


class ProfitMargin(RatioFactor):
    name = "profit_margin"
    description = "Profit Margin - net income divided by revenue"
    category = FactorCategory.QUALITY
    required_columns = ("symbol", "date", "net_income", "revenue")
    numerator = "net_income"
    denominator = "revenue"


class Leverage(RatioFactor):
    name = "leverage"
    description = "Leverage - total debt divided by shareholders' equity"
    category = FactorCategory.QUALITY
    required_columns = ("symbol", "date", "total_debt", "shareholders_equity")
    numerator = "total_debt"
    denominator = "shareholders_equity"


class CurrentRatio(RatioFactor):
    name = "current_ratio"
    description = "Current Ratio - current assets divided by current liabilities"
    category = FactorCategory.QUALITY
    required_columns = ("symbol", "date", "current_assets", "current_liabilities")
    numerator = "current_assets"
    denominator = "current_liabilities"


class GrossProfitability(Factor):
    """Novy-Marx gross profitability: (revenue - cogs) / total_assets."""

    name = "gross_profitability"
    description = "Gross profitability (Novy-Marx) - gross profit scaled by total assets"
    category = FactorCategory.QUALITY
    required_columns = ("symbol", "date", "revenue", "cogs", "total_assets")
    frequency = DataFrequency.QUARTERLY

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        values = (history["revenue"] - history["cogs"]) / history["total_assets"]
        return self.finish(history, as_of_date, values)


class EarningsSmoothness(Factor):
    """
    std(net income) / std(operating cash flow) over the trailing 8 quarters.

    Lower is smoother, i.e. higher quality. Population standard deviations.
    """

    name = "earnings_smoothness"
    description = "Earnings Smoothness - ratio of net income volatility to cash flow volatility"
    category = FactorCategory.QUALITY
    required_columns = ("symbol", "date", "net_income", "operating_cash_flow")
    frequency = DataFrequency.QUARTERLY
    window = 8

    @property
    def lookback(self) -> int:
        return self.window

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        ni_std = rolling(history, "net_income", self.window, how="std", ddof=0)
        ocf_std = rolling(history, "operating_cash_flow", self.window, how="std", ddof=0)
        return self.finish(history, as_of_date, ni_std / ocf_std)
