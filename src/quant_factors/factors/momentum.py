"""
Momentum factors: price change over a trailing window, skipping the most
recent days to avoid short-term reversal, plus RSI.
"""

from dataclasses import dataclass

import numpy as np

from ..base import ConfigurableFactor, DataFrequency, FactorCategory
from ..panel import from_records, lag, normalize_date, per_symbol_series


class PriceMomentum(ConfigurableFactor):
    """
    (P_{t-skip} / P_{t-skip-lookback}) - 1.

    Both prices come from the symbol's own series, counted in rows (trading
    days), so a symbol needs lookback + skip_days rows before the as-of date.
    """

    category = FactorCategory.MOMENTUM
    required_columns = ("symbol", "date", "close")
    frequency = DataFrequency.DAILY

    @property
    def lookback(self) -> int:
        return self.config.lookback + self.config.skip_days

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        recent = lag(history, "close", self.config.skip_days)
        past = lag(history, "close", self.config.skip_days + self.config.lookback)
        return self.finish(history, as_of_date, recent / past - 1.0)


@dataclass
class ShortTermMomentumConfig:
    lookback: int = 21
    skip_days: int = 5


@dataclass
class MediumTermMomentumConfig:
    lookback: int = 126
    skip_days: int = 21


@dataclass
class LongTermMomentumConfig:
    lookback: int = 252
    skip_days: int = 21


class ShortTermMomentum(PriceMomentum):
    name = "short_term_momentum"
    description = "1-month (21-day) momentum - short-term trend persistence"
    config_class = ShortTermMomentumConfig


class MediumTermMomentum(PriceMomentum):
    name = "medium_term_momentum"
    description = "6-month (126-day) momentum - medium-term trend persistence"
    config_class = MediumTermMomentumConfig


class LongTermMomentum(PriceMomentum):
    name = "long_term_momentum"
    description = "12-month (252-day) momentum with 1-month skip - long-term trend persistence"
    config_class = LongTermMomentumConfig


@dataclass
class RsiConfig:
    period: int = 14


class Rsi(ConfigurableFactor):
    """
    Relative Strength Index, 100 - 100 / (1 + avg_gain / avg_loss).

    Computed with a per-symbol loop over the last period + 1 closes.
    A series with no losses scores 100.
    """

    name = "rsi"
    description = "14-day Relative Strength Index - momentum strength indicator"
    category = FactorCategory.MOMENTUM
    required_columns = ("symbol", "date", "close")
    frequency = DataFrequency.DAILY
    config_class = RsiConfig

    @property
    def lookback(self) -> int:
        return self.config.period

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        asof = normalize_date(as_of_date)
        window = self.config.period + 1

        records = []
        for symbol, last_date, closes in per_symbol_series(history, "close", tail=window):
            # Symbols that did not trade on the as-of date get no value
            if last_date != asof or len(closes) < window:
                continue
            changes = np.diff(closes)
            avg_gain = np.clip(changes, 0.0, None).mean()
            avg_loss = np.clip(-changes, 0.0, None).mean()
            if avg_loss == 0:
                rsi = 100.0
            else:
                rsi = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)
            records.append((symbol, last_date, rsi))

        return from_records(records, self.name)
