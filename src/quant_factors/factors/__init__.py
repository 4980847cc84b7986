"""
Standard factor formulas, grouped by category.

DEFAULT_FACTORS lists the classes FactorRegistry.with_defaults() instantiates.
"""

from .growth import AssetGrowth, EarningsGrowth, SalesGrowth
from .liquidity import (
    AmihudIlliquidity, BidAskSpread, CorwinSchultz, DaysToCover, DollarVolume, KyleLambda,
    RelativeVolume, RollSpread, ShortInterestRatio, TurnoverRatio
)
from .momentum import LongTermMomentum, MediumTermMomentum, Rsi, ShortTermMomentum
from .quality import (
    CurrentRatio, EarningsSmoothness, GrossProfitability, Leverage, ProfitMargin, Roa, Roe
)
from .sentiment import AnalystRevisions
from .size import LogMarketCap, MarketCap
from .value import BookToPrice, DividendYield, EarningsYield, FcfYield
from .volatility import HistoricalVolatility, MarketBeta, ReturnSkewness

DEFAULT_FACTORS = (
    # Momentum
    ShortTermMomentum,
    MediumTermMomentum,
    LongTermMomentum,
    Rsi,
    # Value
    BookToPrice,
    EarningsYield,
    FcfYield,
    DividendYield,
    # Quality
    Roe,
    Roa,
    ProfitMargin,
    Leverage,
    CurrentRatio,
    GrossProfitability,
    EarningsSmoothness,
    # Size
    MarketCap,
    LogMarketCap,
    # Volatility
    HistoricalVolatility,
    MarketBeta,
    ReturnSkewness,
    # Growth
    AssetGrowth,
    SalesGrowth,
    EarningsGrowth,
    # Liquidity
    AmihudIlliquidity,
    TurnoverRatio,
    DollarVolume,
    RollSpread,
    BidAskSpread,
    CorwinSchultz,
    ShortInterestRatio,
    DaysToCover,
    RelativeVolume,
    KyleLambda,
    # Sentiment
    AnalystRevisions,
)

__all__ = [cls.__name__ for cls in DEFAULT_FACTORS] + ["DEFAULT_FACTORS"]
