"""
Tests for the standard factor formulas.
"""

import numpy as np
import pandas as pd
import pytest

from quant_factors.base import ConfigurableFactor, FactorCategory
from quant_factors.factors import (
    DEFAULT_FACTORS, AmihudIlliquidity, AnalystRevisions, BidAskSpread, BookToPrice,
    CorwinSchultz, DaysToCover, EarningsSmoothness, GrossProfitability,
    HistoricalVolatility, KyleLambda, LogMarketCap, MarketBeta, MarketCap,
    ProfitMargin, RelativeVolume, ReturnSkewness, RollSpread, Rsi, SalesGrowth,
    ShortInterestRatio, ShortTermMomentum
)


def series_panel(closes, symbol="AAA", start="2024-01-01", **extra):
    """Single-symbol daily panel from a list of closes."""
    dates = pd.bdate_range(start, periods=len(closes))
    data = {"symbol": symbol, "date": dates, "close": [float(c) for c in closes]}
    data.update(extra)
    return pd.DataFrame(data)


class TestDefaultFactorMetadata:
    """Test every standard factor satisfies the metadata contract."""

    @pytest.mark.parametrize("factor_cls", DEFAULT_FACTORS, ids=lambda cls: cls.__name__)
    def test_metadata(self, factor_cls):
        factor = factor_cls()
        info = factor.info()

        assert info.name and info.description
        assert info.required_columns[:2] == ("symbol", "date")
        assert info.lookback >= 0
        assert isinstance(info.category, FactorCategory)

    def test_names_unique_and_categories_covered(self):
        names = [cls.name for cls in DEFAULT_FACTORS]
        assert len(names) == len(set(names)) == 34
        assert {cls.category for cls in DEFAULT_FACTORS} == set(FactorCategory)


class TestMomentum:
    """Test momentum formulas."""

    def test_price_momentum_skips_recent_days(self):
        """Test (P[t-skip] / P[t-skip-lookback]) - 1."""
        panel = series_panel([100, 101, 102, 103, 104])
        factor = ShortTermMomentum().with_params(lookback=2, skip_days=1)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["short_term_momentum"].iloc[0] == pytest.approx(103.0 / 101.0 - 1.0)

    def test_rsi_mixed_changes(self):
        """Test alternating +2 / -1 moves give RS = 2, RSI = 66.67."""
        closes = [100.0]
        for i in range(14):
            closes.append(closes[-1] + (2.0 if i % 2 == 0 else -1.0))
        panel = series_panel(closes)

        result = Rsi().compute_raw(panel, panel["date"].iloc[-1])

        assert result["rsi"].iloc[0] == pytest.approx(100.0 - 100.0 / 3.0)

    def test_rsi_no_losses(self):
        panel = series_panel(range(100, 116))
        result = Rsi().compute_raw(panel, panel["date"].iloc[-1])
        assert result["rsi"].iloc[0] == 100.0

    def test_rsi_requires_period_plus_one_closes(self):
        panel = series_panel(range(100, 114))
        assert Rsi().compute_raw(panel, panel["date"].iloc[-1]).empty

    def test_rsi_skips_symbol_absent_on_as_of_date(self):
        """Test a symbol whose last close is before the as-of date gets no value."""
        a = series_panel(range(100, 120), symbol="AAA")
        b = series_panel(range(100, 119), symbol="BBB")
        panel = pd.concat([a, b], ignore_index=True)

        result = Rsi().compute_raw(panel, a["date"].iloc[-1])

        assert list(result["symbol"]) == ["AAA"]

    def test_rsi_skips_symbol_with_missing_as_of_close(self):
        """Test a NaN close on the as-of date is not filled from older closes."""
        a = series_panel(range(100, 120), symbol="AAA")
        b = series_panel(range(100, 120), symbol="BBB")
        b.loc[b.index[-1], "close"] = np.nan
        panel = pd.concat([a, b], ignore_index=True)

        result = Rsi().compute_raw(panel, a["date"].iloc[-1])

        assert list(result["symbol"]) == ["AAA"]


class TestValueAndSize:
    """Test ratio factors on the as-of date."""

    def test_book_to_price_zero_market_cap_dropped(self):
        panel = pd.DataFrame({
            "symbol": ["A", "B"],
            "date": pd.to_datetime(["2024-03-31"] * 2),
            "book_equity": [50.0, 10.0],
            "market_cap": [100.0, 0.0],
        })

        result = BookToPrice().compute_raw(panel, "2024-03-31")

        assert list(result["symbol"]) == ["A"]
        assert result["book_to_price"].iloc[0] == 0.5

    def test_market_cap_and_log(self):
        panel = series_panel([10.0, 20.0], shares_outstanding=[100.0, 100.0])
        asof = panel["date"].iloc[-1]

        assert MarketCap().compute_raw(panel, asof)["market_cap"].iloc[0] == 2000.0
        assert LogMarketCap().compute_raw(panel, asof)["log_market_cap"].iloc[0] == pytest.approx(np.log(2000.0))

    def test_log_market_cap_non_positive_dropped(self):
        panel = series_panel([10.0], shares_outstanding=[0.0])
        assert LogMarketCap().compute_raw(panel, panel["date"].iloc[0]).empty


class TestQualityAndGrowth:
    """Test fundamental formulas."""

    def test_gross_profitability(self):
        panel = pd.DataFrame({
            "symbol": ["A"],
            "date": pd.to_datetime(["2024-03-31"]),
            "revenue": [500.0],
            "cogs": [300.0],
            "total_assets": [1000.0],
        })
        result = GrossProfitability().compute_raw(panel, "2024-03-31")
        assert result["gross_profitability"].iloc[0] == pytest.approx(0.2)

    def test_profit_margin(self):
        panel = pd.DataFrame({
            "symbol": ["AAPL", "GOOGL", "MSFT"],
            "date": pd.to_datetime(["2024-03-31"] * 3),
            "net_income": [25000.0, 15000.0, 20000.0],
            "revenue": [100000.0, 75000.0, 80000.0],
        })

        result = ProfitMargin().compute_raw(panel, "2024-03-31")

        assert ProfitMargin().lookback == 1
        np.testing.assert_allclose(result["profit_margin"].to_numpy(), [0.25, 0.2, 0.25])

    def test_earnings_smoothness(self):
        """Test population std ratio over eight quarters."""
        net_income = [10.0, 12.0, 9.0, 11.0, 10.0, 13.0, 8.0, 12.0]
        cash_flow = [5.0 * x for x in net_income]
        panel = pd.DataFrame({
            "symbol": "A",
            "date": pd.date_range("2022-01-01", periods=8, freq="QS"),
            "net_income": net_income,
            "operating_cash_flow": cash_flow,
        })

        result = EarningsSmoothness().compute_raw(panel, panel["date"].iloc[-1])

        assert result["earnings_smoothness"].iloc[0] == pytest.approx(0.2)
        assert EarningsSmoothness().compute_raw(panel, panel["date"].iloc[-2]).empty

    def test_sales_growth_custom_periods(self):
        panel = pd.DataFrame({
            "symbol": "A",
            "date": pd.date_range("2023-01-01", periods=3, freq="QS"),
            "revenue": [100.0, 110.0, 150.0],
        })
        factor = SalesGrowth().with_params(growth_periods=2)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert factor.lookback == 2
        assert result["sales_growth"].iloc[0] == pytest.approx(0.5)


class TestVolatility:
    """Test return-based risk measures."""

    def test_historical_volatility_annualized(self):
        closes = [100.0, 110.0, 99.0, 108.9]
        panel = series_panel(closes)
        factor = HistoricalVolatility().with_params(lookback=3, min_periods=3)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        returns = pd.Series(closes).pct_change().dropna()
        expected = returns.std(ddof=1) * np.sqrt(252)
        assert result["historical_volatility"].iloc[0] == pytest.approx(expected)

    def test_market_beta_ratio_of_std(self):
        """Test a stock moving exactly twice the market scores 2."""
        market = [0.0, 0.01, -0.02, 0.015, 0.005]
        closes = [100.0]
        for r in market[1:]:
            closes.append(closes[-1] * (1.0 + 2.0 * r))
        panel = series_panel(closes, market_return=market)
        factor = MarketBeta().with_params(lookback=4, min_periods=4)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["market_beta"].iloc[0] == pytest.approx(2.0)

    def test_return_skewness_window_gate(self, price_panel):
        dates = price_panel["date"].unique()
        factor = ReturnSkewness()

        assert factor.compute_raw(price_panel, dates[251]).empty
        assert len(factor.compute_raw(price_panel, dates[252])) == 3


class TestLiquidity:
    """Test trading-activity measures."""

    def test_amihud(self):
        panel = series_panel([10.0, 11.0, 11.0], volume=[100.0, 100.0, 200.0])
        factor = AmihudIlliquidity().with_params(lookback=2, min_periods=2)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["amihud_illiquidity"].iloc[0] == pytest.approx(0.05 / 1100.0, rel=1e-6)

    def test_roll_spread_bid_ask_bounce(self):
        """Test prices bouncing between 100 and 101 imply a spread of 2."""
        panel = series_panel([100, 101] * 4)
        factor = RollSpread().with_params(lookback=4)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["roll_spread"].iloc[0] == pytest.approx(2.0)

    def test_roll_spread_trending_prices(self):
        """Test non-negative serial covariance gives zero spread."""
        panel = series_panel(range(100, 108))
        factor = RollSpread().with_params(lookback=4)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["roll_spread"].iloc[0] == 0.0

    def test_bid_ask_spread(self):
        panel = series_panel([100.0], bid=[99.0], ask=[101.0])

        result = BidAskSpread().compute_raw(panel, panel["date"].iloc[-1])

        assert BidAskSpread().lookback == 1
        assert result["bid_ask_spread"].iloc[0] == pytest.approx(0.02)

    def test_short_interest_ratio(self):
        panel = series_panel([100.0], shares_short=[5e6], float_shares=[1e8])
        result = ShortInterestRatio().compute_raw(panel, panel["date"].iloc[-1])
        assert result["short_interest_ratio"].iloc[0] == pytest.approx(0.05)

    def test_days_to_cover(self):
        """Test shares short over the trailing mean volume."""
        panel = series_panel([1.0, 1.0], volume=[100.0, 300.0], shares_short=[500.0, 1000.0])
        factor = DaysToCover().with_params(lookback=2, min_periods=2)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert DaysToCover().lookback == 20
        assert result["days_to_cover"].iloc[0] == pytest.approx(5.0)

    def test_relative_volume_window_gate(self):
        panel = series_panel([1.0, 1.0, 1.0], volume=[100.0, 100.0, 400.0])
        factor = RelativeVolume().with_params(lookback=3, min_periods=3)

        assert factor.compute_raw(panel, panel["date"].iloc[1]).empty
        result = factor.compute_raw(panel, panel["date"].iloc[-1])
        assert result["relative_volume"].iloc[0] == pytest.approx(2.0)

    def test_corwin_schultz_constant_range(self):
        """Test a steady 2% high-low range gives alpha = ln(1.02), spread = 0.04 / 2.02."""
        panel = series_panel([101.0] * 3, high=[102.0] * 3, low=[100.0] * 3)
        factor = CorwinSchultz().with_params(lookback=2, min_periods=2)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["corwin_schultz_spread"].iloc[0] == pytest.approx(0.04 / 2.02, rel=1e-6)
        # The first day has no previous range, so two rows cannot fill the window
        assert factor.compute_raw(panel, panel["date"].iloc[1]).empty

    def test_corwin_schultz_negative_estimate_floored(self):
        """Test an overnight gap that dwarfs the daily ranges gives a zero spread."""
        panel = series_panel([100.5, 110.5], high=[101.0, 111.0], low=[100.0, 110.0])
        factor = CorwinSchultz().with_params(lookback=1, min_periods=1)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["corwin_schultz_spread"].iloc[0] == 0.0

    def test_kyle_lambda(self):
        """Test cov(|r|, signed volume) / var(signed volume) over three returns."""
        # Returns +10%, -5%, +10% on volumes 200, 100, 200: cov = 10/3, var = 3e4
        panel = series_panel([100.0, 110.0, 104.5, 114.95], volume=[100.0, 200.0, 100.0, 200.0])
        factor = KyleLambda().with_params(lookback=3, min_periods=3)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["kyle_lambda"].iloc[0] == pytest.approx(1.0 / 9000.0, rel=1e-6)

    def test_kyle_lambda_negative_covariance_floored(self):
        panel = series_panel([100.0, 90.0, 94.5, 85.05], volume=[100.0, 200.0, 100.0, 200.0])
        factor = KyleLambda().with_params(lookback=3, min_periods=3)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert result["kyle_lambda"].iloc[0] == 0.0


class TestSentiment:

    def test_analyst_revisions(self):
        panel = series_panel([1.0, 1.0, 1.0], eps_estimate=[1.0, 1.1, 1.2])
        panel = panel.drop(columns="close")
        factor = AnalystRevisions().with_params(lookback_days=2)

        result = factor.compute_raw(panel, panel["date"].iloc[-1])

        assert isinstance(factor, ConfigurableFactor)
        assert result["analyst_revisions"].iloc[0] == pytest.approx(0.2)
