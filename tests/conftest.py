"""
Shared panel fixtures.
"""

import numpy as np
import pandas as pd
import pytest


QUARTER_ENDS = ["2023-01-01", "2023-04-01", "2023-07-01", "2023-10-01", "2024-01-01"]


@pytest.fixture
def quarterly_panel():
    """Two symbols, five quarters of total assets growing 20% over four quarters."""
    rows = []
    for i, date in enumerate(QUARTER_ENDS):
        rows.append({"symbol": "AAPL", "date": date, "total_assets": 100.0 + 5.0 * i})
        rows.append({"symbol": "MSFT", "date": date, "total_assets": 200.0 + 10.0 * i})
    df = pd.DataFrame(rows)
    df["date"] = pd.to_datetime(df["date"])
    return df


@pytest.fixture
def fundamentals_panel():
    """One quarter of fundamentals for three symbols; CCC has no total assets."""
    return pd.DataFrame({
        "symbol": ["AAA", "BBB", "CCC"],
        "date": pd.to_datetime(["2024-03-31"] * 3),
        "net_income": [10.0, 30.0, 20.0],
        "shareholders_equity": [100.0, 200.0, 400.0],
        "total_assets": [200.0, 300.0, np.nan],
    })


@pytest.fixture
def price_panel():
    """Three symbols, 300 business days of deterministic prices and volumes."""
    dates = pd.bdate_range("2023-01-02", periods=300)
    rng = np.random.default_rng(42)
    market_return = rng.normal(0.0003, 0.01, len(dates))

    frames = []
    for symbol, beta in [("AAA", 1.2), ("BBB", 0.8), ("CCC", 1.0)]:
        returns = beta * market_return + rng.normal(0.0, 0.005, len(dates))
        frames.append(pd.DataFrame({
            "symbol": symbol,
            "date": dates,
            "close": 100.0 * np.cumprod(1.0 + returns),
            "volume": rng.integers(100_000, 1_000_000, len(dates)).astype(float),
            "shares_outstanding": 10_000_000.0,
            "market_return": market_return,
        }))
    return pd.concat(frames, ignore_index=True)
