"""Shared fixtures: the state -> city x sector GDP panel."""

from __future__ import annotations

import pandas as pd
import pytest

STATES = ["Rio de Janeiro", "Rio de Janeiro", "São Paulo", "São Paulo"]
CITIES = ["Rio de Janeiro", "Duque de Caxias", "São Paulo", "Campinas"]


@pytest.fixture
def gdp_panel() -> pd.DataFrame:
    """8 bottom series (4 cities x 2 sectors) over 2 quarters, one row each."""
    q1 = [1500, 270, 2800, 500, 2300, 350, 3100, 700]
    q2 = [1700, 310, 2950, 540, 2450, 380, 3250, 740]
    return pd.DataFrame({
        "state": (STATES * 2) * 2,
        "city": (CITIES * 2) * 2,
        "sector": (["Industry"] * 4 + ["Agriculture"] * 4) * 2,
        "quarter": ["2024 Q1"] * 8 + ["2024 Q2"] * 8,
        "gdp": q1 + q2,
    })


@pytest.fixture
def gdp_panel_with_repeats() -> pd.DataFrame:
    """Same panel reported as two rows per (series, quarter)."""
    state = [s for s in STATES for _ in range(2)] * 2
    city = [c for c in CITIES for _ in range(2)] * 2
    sector = ["Industry"] * 8 + ["Agriculture"] * 8
    return pd.DataFrame({
        "state": state * 2,
        "city": city * 2,
        "sector": sector * 2,
        "quarter": ["2024 Q1"] * 16 + ["2024 Q2"] * 16,
        "gdp": [
            1000, 500, 150, 120, 2000, 800, 300, 200,
            1500, 800, 200, 150, 2200, 900, 400, 300,
            1100, 600, 180, 130, 2100, 850, 320, 220,
            1600, 850, 220, 160, 2300, 950, 420, 320,
        ],
    })


@pytest.fixture
def store_panel() -> pd.DataFrame:
    """Region -> store hierarchy without groups; store B2 has no 2024 M02 row."""
    return pd.DataFrame({
        "region": ["North", "North", "South", "South", "North", "North", "South"],
        "store": ["A1", "A2", "B1", "B2", "A1", "A2", "B1"],
        "month": ["2024 M01"] * 4 + ["2024 M02"] * 3,
        "sales": [10.0, 20.0, 30.0, 40.0, 11.0, 21.0, 31.0],
    })
