"""
Shared shapes for the simple fundamental factors.

Most value / quality / size factors are a ratio of two columns observed on
the as-of date, and the growth factors compare a column with its own value
a fixed number of periods earlier. Both shapes live here so each concrete
factor is only its metadata.
"""

from dataclasses import dataclass

from ..base import ConfigurableFactor, DataFrequency, Factor
from ..panel import lag


class RatioFactor(Factor):
    """numerator / denominator on the as-of date; zero denominators drop the row."""

    numerator: str
    denominator: str
    frequency = DataFrequency.QUARTERLY

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        values = history[self.numerator] / history[self.denominator]
        return self.finish(history, as_of_date, values)


@dataclass
class GrowthConfig:
    """Number of periods between the compared observations (4 quarters = YoY)."""
    growth_periods: int = 4


class GrowthFactor(ConfigurableFactor):
    """(x_t / x_{t-n}) - 1 within each symbol's own series."""

    column: str
    config_class = GrowthConfig
    frequency = DataFrequency.QUARTERLY

    @property
    def lookback(self) -> int:
        return self.config.growth_periods

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        previous = lag(history, self.column, self.config.growth_periods)
        return self.finish(history, as_of_date, history[self.column] / previous - 1.0)
