from __future__ import annotations
import pandas as pd

OTHER = "other"


def collapse_levels(s: pd.Series, levels) -> pd.Series:
    # poziomy z długiego ogona -> "other", reszta bez zmian
    levels = {str(v) for v in levels}
    return s.where(~s.isin(levels), other=OTHER)


def add_collapsed(df: pd.DataFrame, rules) -> pd.DataFrame:
    out = df.copy()
    for r in rules:
        if r.source not in out.columns:
            raise SystemExit(f"Brak kolumny {r.source} do agregacji poziomów")
        # zawsze z kolumny źródłowej, więc warianty (agg_power / agg_power_2) są niezależne
        out[r.target] = collapse_levels(out[r.source], r.collapse)
    return out
