from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import json
import pandas as pd

from mtpl_eda.settings import RunParams, load_params
from mtpl_eda.data.load_french import load_raw, POLICY_COLS
from mtpl_eda.features.binning import add_bins, OutOfRangeError
from mtpl_eda.features.collapse import add_collapsed


@dataclass
class ValidationReport:
    """Anomalie zbierane w trakcie przebiegu; raportowane na końcu, nie przerywają."""
    mismatched_ids: list = field(default_factory=list)
    orphan_ids: list = field(default_factory=list)
    orphan_rows: int = 0

    @property
    def ok(self) -> bool:
        return not self.mismatched_ids and not self.orphan_ids

    def to_dict(self) -> dict:
        return {
            "mismatched_count": len(self.mismatched_ids),
            "mismatched_ids": [int(i) for i in self.mismatched_ids],
            "orphan_rows": int(self.orphan_rows),
            "orphan_ids": [int(i) for i in self.orphan_ids],
        }

    def show(self):
        print("\n[CHECKS] claim_count vs liczba szkód w tabeli claims")
        if self.mismatched_ids:
            print(f"[WARN] niezgodne polisy: {len(self.mismatched_ids)}, np. {self.mismatched_ids[:10]}")
        else:
            print("[OK] brak niezgodności")
        if self.orphan_rows:
            print(f"[WARN] szkody bez polisy: {self.orphan_rows} wierszy "
                  f"({len(self.orphan_ids)} policy_id), np. {self.orphan_ids[:10]}")


def aggregate_claims(claims: pd.DataFrame) -> pd.DataFrame:
    """Jeden wiersz na policy_id obecne w claims: num_claim (liczba), total_claims (suma)."""
    return (
        claims.groupby("policy_id", as_index=False, sort=True)
              .agg(num_claim=("claim_amount", "size"),
                   total_claims=("claim_amount", "sum"))
    )


def find_orphans(policy: pd.DataFrame, claims: pd.DataFrame) -> pd.DataFrame:
    return claims.loc[~claims["policy_id"].isin(policy["policy_id"])]


def merge_claims(policy: pd.DataFrame, agg: pd.DataFrame, report: ValidationReport | None = None) -> pd.DataFrame:
    merged = policy.merge(agg, on="policy_id", how="left", validate="one_to_one")
    merged["num_claim"] = merged["num_claim"].fillna(0).astype("int64")
    merged["total_claims"] = merged["total_claims"].fillna(0.0).astype(float)

    mismatch = merged.loc[merged["num_claim"] != merged["claim_count"], "policy_id"]
    if report is not None:
        report.mismatched_ids.extend(mismatch.tolist())

    # num_claim służy tylko do walidacji
    return merged.drop(columns=["num_claim"])


def derive_features(df: pd.DataFrame, params: RunParams) -> pd.DataFrame:
    out = add_bins(df, params.bins)
    return add_collapsed(out, params.collapse)


def capped_view(df: pd.DataFrame, params: RunParams) -> pd.DataFrame:
    out = df.copy()
    if params.exposure_cap is not None:
        out["exposure"] = out["exposure"].clip(upper=params.exposure_cap)
    if params.outliers.enabled:
        out["claim_count"] = out["claim_count"].clip(0, params.outliers.max_claim_count)
        out = out[out["exposure"] >= params.outliers.min_exposure].copy()
    return out


def build_policy_claim(policy: pd.DataFrame, claims: pd.DataFrame,
                       params: RunParams) -> tuple[pd.DataFrame, ValidationReport]:
    report = ValidationReport()

    orphans = find_orphans(policy, claims)
    report.orphan_rows = len(orphans)
    report.orphan_ids = sorted(orphans["policy_id"].unique().tolist())

    agg = aggregate_claims(claims.loc[~claims.index.isin(orphans.index)])
    merged = merge_claims(policy, agg, report)
    return derive_features(merged, params), report


def write_table(df: pd.DataFrame, out_dir: Path, name: str) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    csv_path = out_dir / f"{name}.csv"
    pq_path = out_dir / f"{name}.parquet"
    df.to_csv(csv_path, index=False)
    df.to_parquet(pq_path, index=False)
    print(f"[OK] {name} saved -> {csv_path}, {pq_path}")
    return [csv_path, pq_path]


def run(params: RunParams) -> tuple[pd.DataFrame, ValidationReport]:
    policy, claims = load_raw(params.raw_dir)
    pc, report = build_policy_claim(policy, claims, params)

    print("\n[CHECKS]")
    print("exposure sum:", float(pc["exposure"].sum()))
    print("total claims:", int(pc["claim_count"].sum()))
    print("total amount:", float(pc["total_claims"].sum()))
    print("policies with exposure > 1:", int((pc["exposure"] > 1).sum()))

    out = params.processed_dir
    write_table(policy[POLICY_COLS], out, "policy")
    write_table(claims, out, "claims")
    write_table(pc, out, "policy_claim")
    if params.capped_view:
        write_table(capped_view(pc, params), out, "policy_claim_capped")

    report.show()
    val_path = out / "validation.json"
    val_path.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
    print(f"[OK] validation -> {val_path}")
    return pc, report


def main():
    try:
        run(load_params())
    except OutOfRangeError as e:
        raise SystemExit(f"[ERR ] {e}")


if __name__ == "__main__":
    main()
