import math
import numpy as np
import pandas as pd
import pytest

from mtpl_eda.eda.summaries import (
    one_way, portfolio_totals, claim_count_distribution, describe_table, tail_curve,
)


@pytest.fixture
def pc():
    return pd.DataFrame({
        "policy_id": [1, 2, 3, 4],
        "claim_count": [0, 1, 2, 0],
        "exposure": [1.0, 0.5, 1.5, 0.0],
        "total_claims": [0.0, 100.0, 300.0, 0.0],
        "fuel": ["Diesel", "Diesel", "Regular", "Electric"],
    })


def test_portfolio_totals(pc):
    t = portfolio_totals(pc)
    assert t["policies"] == 4
    assert t["claims_sum"] == 3
    assert t["frequency"] == pytest.approx(1.0)
    assert t["severity_mean_on_paid"] == pytest.approx(200.0)
    assert t["exposure_gt_1"] == 1


def test_one_way_ratios(pc):
    tab = one_way(pc, "fuel").set_index("fuel")
    assert tab.loc["Diesel", "exposure"] == 1.5
    assert tab.loc["Diesel", "frequency"] == pytest.approx(1 / 1.5)
    assert tab.loc["Regular", "severity"] == pytest.approx(150.0)
    assert tab.loc["Regular", "pure_premium"] == pytest.approx(200.0)
    # zero exposure / zero claims -> NaN, no division error
    assert math.isnan(tab.loc["Electric", "frequency"])
    assert math.isnan(tab.loc["Electric", "severity"])
    assert tab["exposure_share"].sum() == pytest.approx(1.0)


def test_one_way_respects_order(pc):
    tab = one_way(pc, "fuel", order=["Regular", "Electric", "Diesel"])
    assert tab["fuel"].tolist() == ["Regular", "Electric", "Diesel"]


def test_claim_count_distribution(pc):
    d = claim_count_distribution(pc)
    assert d["claim_count"].tolist() == [0, 1, 2]
    assert d["policies"].tolist() == [2, 1, 1]


def test_describe_has_missing_share(pc):
    desc = describe_table(pc)
    assert "missing_share" in desc.columns
    assert (desc["missing_share"] == 0).all()


def test_tail_curve_recovers_pareto_slope():
    rng = np.random.default_rng(0)
    x = (1 - rng.random(20000)) ** (-1 / 2.0)  # Pareto alpha=2, x_min=1
    curve, fit = tail_curve(x, tail_share=0.2)
    assert curve["survival"].iloc[0] == 1.0
    assert fit["alpha"] == pytest.approx(2.0, rel=0.15)


def test_tail_curve_needs_data():
    with pytest.raises(ValueError):
        tail_curve([1.0, -2.0])
