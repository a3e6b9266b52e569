from __future__ import annotations
import numpy as np
import pandas as pd


def _ratio(num, den):
    num = np.asarray(num, dtype=float)
    den = np.asarray(den, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(den > 0, num / np.where(den > 0, den, 1.0), np.nan)


def describe_table(df: pd.DataFrame) -> pd.DataFrame:
    desc = df.describe().T
    desc["missing_share"] = df[desc.index].isna().mean()
    return desc


def portfolio_totals(df: pd.DataFrame) -> dict:
    expo = float(df["exposure"].sum())
    claims = int(df["claim_count"].sum())
    amount = float(df["total_claims"].sum())
    paid = df.loc[df["total_claims"] > 0, "total_claims"]
    return {
        "policies": int(len(df)),
        "exposure_sum": expo,
        "claims_sum": claims,
        "frequency": claims / expo if expo > 0 else float("nan"),
        "total_amount": amount,
        "severity_mean_on_paid": float(paid.mean()) if len(paid) else 0.0,
        "exposure_gt_1": int((df["exposure"] > 1).sum()),
    }


def one_way(df: pd.DataFrame, col: str, order=None) -> pd.DataFrame:
    """Tabela jednowymiarowa: ekspozycja, szkody, częstość, szkodowość i składka czysta per poziom."""
    grp = (
        df.groupby(col, dropna=False, observed=True)
          .agg(n=("policy_id", "size"),
               exposure=("exposure", "sum"),
               claims=("claim_count", "sum"),
               amount=("total_claims", "sum"))
          .reset_index()
    )
    grp["frequency"] = _ratio(grp["claims"], grp["exposure"])
    grp["severity"] = _ratio(grp["amount"], grp["claims"])
    grp["pure_premium"] = _ratio(grp["amount"], grp["exposure"])
    grp["exposure_share"] = grp["exposure"] / max(grp["exposure"].sum(), 1e-12)
    if order is not None:
        rank = {v: i for i, v in enumerate(order)}
        grp = grp.sort_values(col, key=lambda s: s.map(rank).fillna(len(rank)), kind="mergesort")
    else:
        grp = grp.sort_values(col, kind="mergesort")
    return grp.reset_index(drop=True)


def claim_count_distribution(df: pd.DataFrame) -> pd.DataFrame:
    d = (
        df.groupby("claim_count")
          .agg(policies=("policy_id", "size"), exposure=("exposure", "sum"))
          .reset_index()
    )
    d["policy_share"] = d["policies"] / max(d["policies"].sum(), 1)
    return d


def tail_curve(amounts, tail_share: float = 0.1) -> tuple[pd.DataFrame, dict]:
    """
    Empiryczna funkcja przeżycia kwot szkód w skali log-log
    + prosta MNK na górnym ogonie (log S = a + b log x). Tylko diagnostyka.
    """
    x = np.sort(np.asarray(amounts, dtype=float))
    x = x[x > 0]
    n = len(x)
    if n < 3:
        raise ValueError("Za mało dodatnich kwot szkód do krzywej ogona")
    surv = 1.0 - np.arange(n) / n
    curve = pd.DataFrame({"amount": x, "survival": surv,
                          "log_amount": np.log(x), "log_survival": np.log(surv)})

    k = max(int(np.ceil(n * tail_share)), 3)
    tail = curve.tail(k)
    slope, intercept = np.polyfit(tail["log_amount"], tail["log_survival"], 1)
    fit = {
        "n_tail": int(k),
        "threshold": float(tail["amount"].iloc[0]),
        "slope": float(slope),
        "intercept": float(intercept),
        "alpha": float(-slope),
    }
    return curve, fit
