import numpy as np
import pandas as pd

from mtpl_eda.features.collapse import collapse_levels, add_collapsed, OTHER
from mtpl_eda.settings import RunParams


def test_power_variants_differ_only_on_i():
    df = pd.DataFrame({"power": ["i", "j", "k"], "region": ["R11", "R23", "R24"]})
    out = add_collapsed(df, RunParams().collapse)
    assert out["agg_power"].tolist() == ["other", "j", "other"]
    assert out["agg_power_2"].tolist() == ["i", "j", "other"]
    assert out["agg_region"].tolist() == ["R11", "other", "R24"]
    # source untouched
    assert df["power"].tolist() == ["i", "j", "k"]


def test_collapse_keeps_missing():
    s = pd.Series(["R25", None, "R11"], dtype=object)
    out = collapse_levels(s, {"R25"})
    assert out.iloc[0] == OTHER
    assert out.isna().iloc[1]
    assert out.iloc[2] == "R11"


def test_rule_order_does_not_matter():
    df = pd.DataFrame({"power": list("defghijklmno"), "region": ["R11"] * 12})
    rules = RunParams().collapse
    a = add_collapsed(df, rules)
    b = add_collapsed(df, tuple(reversed(rules)))
    pd.testing.assert_frame_equal(a[sorted(a.columns)], b[sorted(b.columns)])
    assert (a["agg_power"] == OTHER).sum() == 6
    assert (a["agg_power_2"] == OTHER).sum() == 5
    assert np.array_equal(a["agg_power"] == "i", np.zeros(12, dtype=bool))
