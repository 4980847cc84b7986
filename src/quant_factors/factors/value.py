"""
Value factors: fundamentals relative to market value on the as-of date.
"""

from ..base import FactorCategory
from ._ratio import RatioFactor


class BookToPrice(RatioFactor):
    name = "book_to_price"
    description = "Book equity divided by market capitalization - measures relative valuation"
    category = FactorCategory.VALUE
    required_columns = ("symbol", "date", "book_equity", "market_cap")
    numerator = "book_equity"
    denominator = "market_cap"


class EarningsYield(RatioFactor):
    name = "earnings_yield"
    description = "Net income divided by market capitalization - inverse of P/E ratio"
    category = FactorCategory.VALUE
    required_columns = ("symbol", "date", "net_income", "market_cap")
    numerator = "net_income"
    denominator = "market_cap"


class FcfYield(RatioFactor):
    name = "fcf_yield"
    description = "Free cash flow divided by market capitalization - cash generation relative to valuation"
    category = FactorCategory.VALUE
    required_columns = ("symbol", "date", "free_cash_flow", "market_cap")
    numerator = "free_cash_flow"
    denominator = "market_cap"


class DividendYield(RatioFactor):
    name = "dividend_yield"
    description = "Dividends per share divided by price - measures income return potential"
    category = FactorCategory.VALUE
    required_columns = ("symbol", "date", "dividends_per_share", "close")
    numerator = "dividends_per_share"
    denominator = "close"
