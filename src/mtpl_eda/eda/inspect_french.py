from __future__ import annotations
from pathlib import Path
import json
import pandas as pd

from mtpl_eda.settings import RunParams, load_params
from mtpl_eda.eda.summaries import (
    describe_table, portfolio_totals, one_way, claim_count_distribution,
)
from mtpl_eda.eda import plots


def _load_processed(params: RunParams) -> tuple[pd.DataFrame, pd.DataFrame | None]:
    pc_path = params.processed_dir / "policy_claim.parquet"
    if not pc_path.exists():
        raise SystemExit(f"Brak {pc_path}. Najpierw odpal data/preprocess_french.py")
    pc = pd.read_parquet(pc_path)
    cl_path = params.processed_dir / "claims.parquet"
    claims = pd.read_parquet(cl_path) if cl_path.exists() else None
    return pc, claims


def write_tables(df: pd.DataFrame, params: RunParams) -> list[Path]:
    outd = params.report_dir
    outd.mkdir(parents=True, exist_ok=True)
    out = []

    p = outd / "describe.csv"
    describe_table(df).to_csv(p)
    out.append(p)

    p = outd / "claim_count_distribution.csv"
    claim_count_distribution(df).to_csv(p, index=False)
    out.append(p)

    order = plots.level_order(params)
    for c in plots.one_way_columns(params):
        if c in df.columns:
            p = outd / f"by_{c}.csv"
            one_way(df, c, order=order.get(c)).to_csv(p, index=False)
            out.append(p)
    return out


def main():
    params = load_params()
    df, claims = _load_processed(params)

    print("\n[HEAD]")
    print(df.head(10))
    print("\n[DTYPES]")
    print(df.dtypes)

    print("\n[MISSING]")
    print(df.isna().mean().sort_values(ascending=False))

    totals = portfolio_totals(df)
    print("\n[BASICS]")
    for k, v in totals.items():
        print(f"  {k}: {v:,.4f}")
    if totals["exposure_gt_1"]:
        print(f"[WARN] {totals['exposure_gt_1']} polis z ekspozycją > 1 rok (zostają w danych)")

    tables = write_tables(df, params)
    print(f"[OK] {len(tables)} tabel CSV -> {params.report_dir}")

    files, fit = plots.make_all(df, claims, params)
    summary = {"totals": totals, "tail_fit": fit, "plots": [f.name for f in files]}
    p = params.report_dir / "eda_summary.json"
    p.write_text(json.dumps(summary, indent=2), encoding="utf-8")
    print(f"[OK] summary -> {p}")


if __name__ == "__main__":
    main()
