from __future__ import annotations
from pathlib import Path
import pandas as pd

FREQ_FILE = "freMTPLfreq.csv"
SEV_FILE = "freMTPLsev.csv"

POLICY_RENAME = {
    "PolicyID": "policy_id",
    "ClaimNb": "claim_count",
    "Exposure": "exposure",
    "Power": "power",
    "CarAge": "car_age",
    "DriverAge": "driver_age",
    "Brand": "brand",
    "Gas": "fuel",
    "Region": "region",
    "Density": "density",
}
CLAIMS_RENAME = {
    "PolicyID": "policy_id",
    "ClaimAmount": "claim_amount",
}

POLICY_COLS = list(POLICY_RENAME.values())
CLAIMS_COLS = list(CLAIMS_RENAME.values())

POLICY_NUM = ["exposure", "car_age", "driver_age", "density"]
POLICY_CAT = ["power", "brand", "fuel", "region"]


def _ensure_cols(df: pd.DataFrame, need, table: str):
    miss = [c for c in need if c not in df.columns]
    if miss:
        raise SystemExit(f"Brakuje kolumn w tabeli {table}: {miss}")


def _ids(s: pd.Series, table: str) -> pd.Series:
    ids = pd.to_numeric(s, errors="coerce")
    if ids.isna().any():
        raise SystemExit(f"Niepoprawne policy_id w tabeli {table}: {int(ids.isna().sum())} wierszy")
    return ids.astype("int64")


def _numeric(s: pd.Series, table: str, positive: bool = False) -> pd.Series:
    v = pd.to_numeric(s, errors="coerce").astype(float)
    bad = v.isna() | (v <= 0) if positive else v.isna()
    if bad.any():
        rule = "dodatnie liczby" if positive else "liczby"
        raise SystemExit(f"Niepoprawne wartości {s.name} w tabeli {table} (oczekiwane {rule}): "
                         f"{int(bad.sum())} wierszy, np. {s[bad].head(5).tolist()}")
    return v


def prepare_policy(raw: pd.DataFrame) -> pd.DataFrame:
    """Nazwy angielskie + typy dla tabeli polis. Kolejność kolumn jak w POLICY_COLS."""
    df = raw.rename(columns=POLICY_RENAME)
    _ensure_cols(df, POLICY_COLS, "policy")
    df = df[POLICY_COLS].copy()

    df["policy_id"] = _ids(df["policy_id"], "policy")
    if df["policy_id"].duplicated().any():
        dup = df.loc[df["policy_id"].duplicated(), "policy_id"].head(5).tolist()
        raise SystemExit(f"Zduplikowane policy_id w tabeli policy, np. {dup}")

    cnt = pd.to_numeric(df["claim_count"], errors="coerce")
    if cnt.isna().any() or (cnt < 0).any() or (cnt % 1 != 0).any():
        raise SystemExit("Kolumna claim_count musi być nieujemną liczbą całkowitą")
    df["claim_count"] = cnt.astype("int64")

    for c in POLICY_NUM:
        df[c] = _numeric(df[c], "policy", positive=(c == "exposure"))
    for c in POLICY_CAT:
        df[c] = df[c].where(df[c].isna(), df[c].astype(str).str.strip())
    return df


def prepare_claims(raw: pd.DataFrame) -> pd.DataFrame:
    df = raw.rename(columns=CLAIMS_RENAME)
    _ensure_cols(df, CLAIMS_COLS, "claims")
    df = df[CLAIMS_COLS].copy()
    df["policy_id"] = _ids(df["policy_id"], "claims")
    df["claim_amount"] = _numeric(df["claim_amount"], "claims", positive=True)
    return df


def load_raw(raw_dir: Path) -> tuple[pd.DataFrame, pd.DataFrame]:
    freq_path = raw_dir / FREQ_FILE
    sev_path = raw_dir / SEV_FILE
    if not freq_path.exists() or not sev_path.exists():
        raise SystemExit(f"Brakuje plików {FREQ_FILE} / {SEV_FILE} w {raw_dir}/")

    policy = prepare_policy(pd.read_csv(freq_path))
    claims = prepare_claims(pd.read_csv(sev_path))
    print("[INFO] policy shape:", policy.shape)
    print("[INFO] claims shape:", claims.shape)
    return policy, claims
