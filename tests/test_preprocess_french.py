import json
import pandas as pd
import pytest

from mtpl_eda.data.load_french import prepare_policy, prepare_claims
from mtpl_eda.data.preprocess_french import (
    aggregate_claims, merge_claims, find_orphans, build_policy_claim,
    capped_view, run, ValidationReport,
)
from mtpl_eda.settings import RunParams, OutlierPolicy

FINAL_COLS = [
    "policy_id", "claim_count", "exposure", "power", "car_age", "driver_age",
    "brand", "fuel", "region", "density", "total_claims",
    "cat_driver_age", "cat_car_age", "cat_density",
    "agg_power", "agg_power_2", "agg_region",
]


@pytest.fixture
def policy(raw_policy):
    return prepare_policy(raw_policy)


@pytest.fixture
def claims(raw_claims):
    return prepare_claims(raw_claims)


def test_aggregate_counts_and_sums(claims):
    agg = aggregate_claims(claims).set_index("policy_id")
    assert set(agg.index) == {2, 3, 5}
    assert agg.loc[3, "num_claim"] == 2
    assert agg.loc[3, "total_claims"] == 250.25 + 749.75
    assert agg.loc[2, "total_claims"] == 1000.5
    for pid, grp in claims.groupby("policy_id"):
        assert agg.loc[pid, "num_claim"] == len(grp)


def test_aggregate_does_not_depend_on_row_order(claims):
    a = aggregate_claims(claims)
    b = aggregate_claims(claims.iloc[::-1])
    pd.testing.assert_frame_equal(a, b)


def test_merge_zero_fills_and_drops_num_claim(policy, claims):
    merged = merge_claims(policy, aggregate_claims(claims))
    assert "num_claim" not in merged.columns
    assert len(merged) == len(policy)
    assert merged["total_claims"].notna().all()
    no_claims = merged[~merged["policy_id"].isin(claims["policy_id"])]
    assert (no_claims["total_claims"] == 0).all()
    assert list(merged["policy_id"]) == list(policy["policy_id"])


def test_consistent_counts_give_no_anomalies(policy, claims):
    report = ValidationReport()
    merge_claims(policy, aggregate_claims(claims), report)
    assert report.mismatched_ids == []


def test_perturbed_count_gives_exactly_one_anomaly(policy, claims):
    policy.loc[policy["policy_id"] == 4, "claim_count"] = 1
    report = ValidationReport()
    out = merge_claims(policy, aggregate_claims(claims), report)
    assert report.mismatched_ids == [4]
    # advisory only: table is still produced
    assert len(out) == len(policy)


def test_orphan_claims_are_reported(policy, claims):
    extra = pd.concat([claims, pd.DataFrame({"policy_id": [99, 99], "claim_amount": [5.0, 6.0]})],
                      ignore_index=True)
    assert len(find_orphans(policy, extra)) == 2
    pc, report = build_policy_claim(policy, extra, RunParams())
    assert report.orphan_rows == 2
    assert report.orphan_ids == [99]
    assert 99 not in set(pc["policy_id"])
    assert not report.ok


def test_build_policy_claim_schema(policy, claims):
    pc, report = build_policy_claim(policy, claims, RunParams())
    assert list(pc.columns) == FINAL_COLS
    assert report.ok
    row = pc.set_index("policy_id").loc[2]
    assert row["cat_driver_age"] == "(17,22]"
    assert row["cat_car_age"] == "(1,4]"
    assert row["cat_density"] == "[0,40]"
    assert row["agg_power"] == "other"
    assert row["agg_power_2"] == "i"
    assert row["agg_region"] == "other"


def test_capped_view_off_by_default(policy, claims):
    pc, _ = build_policy_claim(policy, claims, RunParams())
    assert not RunParams().capped_view
    p = RunParams(exposure_cap=1.0, outliers=OutlierPolicy(enabled=True, max_claim_count=1, min_exposure=0.1))
    capped = capped_view(pc, p)
    assert capped["exposure"].max() <= 1.0
    assert capped["claim_count"].max() == 1
    assert 5 not in set(capped["policy_id"])  # exposure 0.09
    # canonical table untouched
    assert pc["exposure"].max() == 1.2


def test_run_writes_both_formats(params):
    pc, report = run(params)
    out = params.processed_dir
    for name in ("policy", "claims", "policy_claim"):
        assert (out / f"{name}.csv").exists()
        assert (out / f"{name}.parquet").exists()
        pd.testing.assert_frame_equal(
            pd.read_csv(out / f"{name}.csv"),
            pd.read_parquet(out / f"{name}.parquet"),
            check_dtype=False,
        )
    assert not (out / "policy_claim_capped.csv").exists()
    saved = json.loads((out / "validation.json").read_text(encoding="utf-8"))
    assert saved["mismatched_count"] == 0
    assert "num_claim" not in pd.read_parquet(out / "policy_claim.parquet").columns


def test_run_is_byte_identical_on_rerun(params):
    run(params)
    out = params.processed_dir
    first = {p.name: p.read_bytes() for p in out.iterdir()}
    run(params)
    second = {p.name: p.read_bytes() for p in out.iterdir()}
    assert first == second


def test_run_aborts_on_out_of_range_age(params, raw_policy):
    from mtpl_eda.features.binning import OutOfRangeError
    raw_policy.loc[0, "DriverAge"] = 17
    raw_policy.to_csv(params.raw_dir / "freMTPLfreq.csv", index=False)
    with pytest.raises(OutOfRangeError, match="driver_age"):
        run(params)
