"""
Growth factors: year-over-year change of quarterly fundamentals.

Each compares the as-of quarter with the same symbol's observation
`growth_periods` rows earlier. A symbol with fewer prior quarters is
omitted from the result.
"""

from ..base import FactorCategory
from ._ratio import GrowthFactor


class AssetGrowth(GrowthFactor):
    name = "asset_growth"
    description = "Year-over-year total assets growth rate: (Total Assets_t / Total Assets_{t-4}) - 1"
    category = FactorCategory.GROWTH
    required_columns = ("symbol", "date", "total_assets")
    column = "total_assets"


class SalesGrowth(GrowthFactor):
    name = "sales_growth"
    description = "Year-over-year revenue growth rate: (Revenue_t / Revenue_{t-4}) - 1"
    category = FactorCategory.GROWTH
    required_columns = ("symbol", "date", "revenue")
    column = "revenue"


class EarningsGrowth(GrowthFactor):
    name = "earnings_growth"
    description = "Year-over-year earnings per share growth rate: (EPS_t / EPS_{t-4}) - 1"
    category = FactorCategory.GROWTH
    required_columns = ("symbol", "date", "eps")
    column = "eps"
