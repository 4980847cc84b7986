"""
Sentiment factors derived from analyst estimates.
"""

from dataclasses import dataclass

from ..base import ConfigurableFactor, DataFrequency, FactorCategory
from ..panel import lag


@dataclass
class AnalystRevisionsConfig:
    # 21 = 1 month, 63 = 3 months, 126 = 6 months
    lookback_days: int = 63


class AnalystRevisions(ConfigurableFactor):
    """(current estimate - prior estimate) / |prior estimate|."""

    name = "analyst_revisions"
    description = "Analyst revision momentum - net direction of EPS estimate changes"
    category = FactorCategory.SENTIMENT
    required_columns = ("symbol", "date", "eps_estimate")
    frequency = DataFrequency.DAILY
    config_class = AnalystRevisionsConfig

    @property
    def lookback(self) -> int:
        return self.config.lookback_days

    def compute_raw(self, panel, as_of_date):
        history = self.history(panel, as_of_date)
        prior = lag(history, "eps_estimate", self.config.lookback_days)
        values = (history["eps_estimate"] - prior) / prior.abs()
        return self.finish(history, as_of_date, values)
