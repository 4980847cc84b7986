"""
Liquidity factors: trading activity, price impact and implied spreads.
"""

from dataclasses import dataclass

import numpy as np

from ..base import ConfigurableFactor, DataFrequency, FactorCategory
from ..panel import lag, pct_change, rolling


@dataclass
class LiquidityWindowConfig:
    lookback: int = 21
    min_periods: int = 21


class _WindowedLiquidity(ConfigurableFactor):
    category = FactorCategory.LIQUIDITY
    frequency = DataFrequency.DAILY
    config_class = LiquidityWindowConfig

    @property
    def lookback(self) -> int:
        return self.config.lookback

    def _mean(self, history, column):
        return rolling(history, column, self.config.lookback,
                       min_periods=self.config.min_periods, how="mean")


class AmihudIlliquidity(_WindowedLiquidity):
    """Mean of |return| / (close × volume) over the window."""

    name = "amihud_illiquidity"
    description = "Average ratio of absolute return to dollar volume over 21 days"
    required_columns = ("symbol", "date", "close", "volume")

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        dollar_volume = history["close"] * history["volume"]
        # Epsilon keeps zero-volume days finite
        history["daily_illiquidity"] = pct_change(history, "close").abs() / (dollar_volume + 1e-10)
        return self.finish(history, as_of_date, self._mean(history, "daily_illiquidity"))


class TurnoverRatio(_WindowedLiquidity):
    name = "turnover_ratio"
    description = "Average trading volume as a fraction of shares outstanding over 21 days"
    required_columns = ("symbol", "date", "volume", "shares_outstanding")

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        history["daily_turnover"] = history["volume"] / history["shares_outstanding"]
        return self.finish(history, as_of_date, self._mean(history, "daily_turnover"))


@dataclass
class ShortWindowConfig:
    lookback: int = 20
    min_periods: int = 20


class DollarVolume(_WindowedLiquidity):
    name = "dollar_volume"
    description = "Average dollar volume (price * volume) over 20 days"
    required_columns = ("symbol", "date", "close", "volume")
    config_class = ShortWindowConfig

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        history["daily_dollar_volume"] = history["close"] * history["volume"]
        return self.finish(history, as_of_date, self._mean(history, "daily_dollar_volume"))


@dataclass
class RollSpreadConfig:
    lookback: int = 20


class RollSpread(ConfigurableFactor):
    """
    Roll (1984) implied spread: 2 * sqrt(-cov(dP_t, dP_{t-1})) when the serial
    covariance is negative, else 0. Covariance is E[XY] - E[X]E[Y] over the window.
    """

    name = "roll_spread"
    description = "Implied spread from serial covariance of price changes over 20 days"
    category = FactorCategory.LIQUIDITY
    required_columns = ("symbol", "date", "close")
    frequency = DataFrequency.DAILY
    config_class = RollSpreadConfig

    @property
    def lookback(self) -> int:
        return self.config.lookback

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        window = self.config.lookback

        history["price_change"] = history["close"] - lag(history, "close", 1)
        history["price_change_lag1"] = lag(history, "price_change", 1)
        history["price_change_product"] = history["price_change"] * history["price_change_lag1"]

        mean_product = rolling(history, "price_change_product", window)
        mean_change = rolling(history, "price_change", window)
        mean_change_lag = rolling(history, "price_change_lag1", window)
        cov = mean_product - mean_change * mean_change_lag

        spread = np.where(cov < 0, 2.0 * np.sqrt(-cov.where(cov < 0, 0.0)), 0.0)
        # Keep the min_periods gate: no covariance, no spread
        spread = np.where(cov.isna(), np.nan, spread)
        return self.finish(history, as_of_date, spread)


class DaysToCover(_WindowedLiquidity):
    name = "days_to_cover"
    description = "Days of average volume needed to cover short positions"
    required_columns = ("symbol", "date", "shares_short", "volume")
    config_class = ShortWindowConfig

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        avg_volume = self._mean(history, "volume")
        return self.finish(history, as_of_date, history["shares_short"] / (avg_volume + 1e-10))


class RelativeVolume(_WindowedLiquidity):
    name = "relative_volume"
    description = "Current volume relative to 20-day average volume"
    required_columns = ("symbol", "date", "volume")
    config_class = ShortWindowConfig

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        avg_volume = self._mean(history, "volume")
        return self.finish(history, as_of_date, history["volume"] / (avg_volume + 1e-10))


class CorwinSchultz(_WindowedLiquidity):
    """
    Corwin-Schultz (2012) spread from two-day high/low ranges.

    beta = ln(H_t/L_t)^2 + ln(H_{t-1}/L_{t-1})^2
    gamma = ln(max(H_t, H_{t-1}) / min(L_t, L_{t-1}))^2
    alpha = (sqrt(2) - 1) * sqrt(beta) / (3 - 2*sqrt(2)) - sqrt(gamma / (3 - 2*sqrt(2)))
    spread = 2 * (e^alpha - 1) / (1 + e^alpha), floored at 0, then averaged.
    """

    name = "corwin_schultz_spread"
    description = "High-low spread estimator using 2-day high/low ranges over 20 days"
    required_columns = ("symbol", "date", "high", "low")
    config_class = ShortWindowConfig

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        denominator = 3.0 - 2.0 * np.sqrt(2.0)

        history["high"] = history["high"] + 1e-10
        history["low"] = history["low"] + 1e-10
        history["hl_squared"] = np.log(history["high"] / history["low"]) ** 2
        beta = history["hl_squared"] + lag(history, "hl_squared", 1)

        prev_high = lag(history, "high", 1)
        prev_low = lag(history, "low", 1)
        two_day_high = history["high"].where(history["high"] > prev_high, prev_high)
        two_day_low = history["low"].where(history["low"] < prev_low, prev_low)
        gamma = np.log(two_day_high / two_day_low) ** 2

        alpha = (np.sqrt(2.0) - 1.0) * np.sqrt(beta) / denominator - np.sqrt(gamma / denominator)
        history["daily_spread"] = (2.0 * (np.exp(alpha) - 1.0) / (1.0 + np.exp(alpha))).clip(lower=0.0)
        return self.finish(history, as_of_date, self._mean(history, "daily_spread"))


class KyleLambda(_WindowedLiquidity):
    """
    Price impact: cov(|r|, signed volume) / var(signed volume), floored at 0.

    Signed volume is volume carrying the sign of the day's return. The
    covariance is E[XY] - E[X]E[Y]; the variance is the sample variance.
    """

    name = "kyle_lambda"
    description = "Price impact coefficient from regressing absolute return on signed volume over 20 days"
    required_columns = ("symbol", "date", "close", "volume")
    config_class = ShortWindowConfig

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        returns = pct_change(history, "close")

        history["abs_return"] = returns.abs()
        history["signed_volume"] = np.sign(returns) * history["volume"]
        history["abs_return_x_signed_volume"] = history["abs_return"] * history["signed_volume"]

        cov = (
            self._mean(history, "abs_return_x_signed_volume")
            - self._mean(history, "abs_return") * self._mean(history, "signed_volume")
        )
        var = rolling(history, "signed_volume", self.config.lookback,
                      min_periods=self.config.min_periods, how="var")
        return self.finish(history, as_of_date, (cov / (var + 1e-10)).clip(lower=0.0))


@dataclass
class SnapshotConfig:
    lookback: int = 1


class BidAskSpread(_WindowedLiquidity):
    name = "bid_ask_spread"
    description = "Relative bid-ask spread as percentage of mid-price"
    required_columns = ("symbol", "date", "bid", "ask")
    config_class = SnapshotConfig

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        mid_price = (history["ask"] + history["bid"]) / 2.0
        return self.finish(history, as_of_date, (history["ask"] - history["bid"]) / (mid_price + 1e-10))


class ShortInterestRatio(_WindowedLiquidity):
    name = "short_interest_ratio"
    description = "Ratio of shares sold short to float"
    required_columns = ("symbol", "date", "shares_short", "float_shares")
    config_class = SnapshotConfig

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        return self.finish(history, as_of_date,
                           history["shares_short"] / (history["float_shares"] + 1e-10))
