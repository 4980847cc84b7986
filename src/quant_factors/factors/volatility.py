"""
Volatility factors: total risk, market sensitivity and return asymmetry.

All work on daily simple returns computed within each symbol's series,
then aggregate over a trailing window gated by min_periods.
"""

from dataclasses import dataclass

import numpy as np

from ..base import ConfigurableFactor, DataFrequency, FactorCategory
from ..panel import pct_change, rolling

TRADING_DAYS_PER_YEAR = 252


@dataclass
class HistoricalVolatilityConfig:
    lookback: int = 63
    min_periods: int = 63


class HistoricalVolatility(ConfigurableFactor):
    """Annualized rolling standard deviation of daily returns."""

    name = "historical_volatility"
    description = "Annualized standard deviation of daily returns - total risk measure"
    category = FactorCategory.VOLATILITY
    required_columns = ("symbol", "date", "close")
    frequency = DataFrequency.DAILY
    config_class = HistoricalVolatilityConfig

    @property
    def lookback(self) -> int:
        return self.config.lookback

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        history["return"] = pct_change(history, "close")
        daily_vol = rolling(history, "return", self.config.lookback,
                            min_periods=self.config.min_periods, how="std")
        return self.finish(history, as_of_date, daily_vol * np.sqrt(TRADING_DAYS_PER_YEAR))


@dataclass
class MarketBetaConfig:
    lookback: int = 252
    min_periods: int = 252


class MarketBeta(ConfigurableFactor):
    """
    Market sensitivity, approximated as std(stock returns) / std(market returns).

    This is the documented ranking approximation (correlation assumed to be 1),
    not Cov(R_i, R_m) / Var(R_m). `market_return` is the benchmark's daily
    return on the same row.
    """

    name = "market_beta"
    description = "Systematic risk exposure - covariance of returns with market divided by market variance"
    category = FactorCategory.VOLATILITY
    required_columns = ("symbol", "date", "close", "market_return")
    frequency = DataFrequency.DAILY
    config_class = MarketBetaConfig

    @property
    def lookback(self) -> int:
        return self.config.lookback

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        history["return"] = pct_change(history, "close")
        window, min_periods = self.config.lookback, self.config.min_periods
        stock_std = rolling(history, "return", window, min_periods=min_periods, how="std")
        market_std = rolling(history, "market_return", window, min_periods=min_periods, how="std")
        return self.finish(history, as_of_date, stock_std / market_std)


@dataclass
class ReturnSkewnessConfig:
    lookback: int = 252
    min_periods: int = 252


class ReturnSkewness(ConfigurableFactor):
    """Rolling sample skewness of daily returns."""

    name = "return_skewness"
    description = "Return distribution asymmetry - third standardized moment of daily returns"
    category = FactorCategory.VOLATILITY
    required_columns = ("symbol", "date", "close")
    frequency = DataFrequency.DAILY
    config_class = ReturnSkewnessConfig

    @property
    def lookback(self) -> int:
        return self.config.lookback

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        history["return"] = pct_change(history, "close")
        skew = rolling(history, "return", self.config.lookback,
                       min_periods=self.config.min_periods, how="skew")
        return self.finish(history, as_of_date, skew)
