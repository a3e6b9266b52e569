from __future__ import annotations
import math
import numpy as np
import pandas as pd


class OutOfRangeError(ValueError):
    """Wartość spoza zakresu punktów cięcia - nie przypisujemy jej do najbliższego przedziału."""

    def __init__(self, field: str, values):
        self.field = field
        self.values = list(values)
        sample = self.values[:5]
        super().__init__(
            f"{field}: {len(self.values)} wartości poza zakresem przedziałów, np. {sample}"
        )


def _fmt_edge(x: float) -> str:
    if math.isinf(x):
        return "Inf" if x > 0 else "-Inf"
    if float(x).is_integer():
        return str(int(x))
    return np.format_float_positional(float(x), trim="-")


def bin_labels(cutpoints, include_lowest: bool = False) -> list[str]:
    """Etykiety przedziałów prawostronnie domkniętych, np. '(22,26]'; '[0,1]' dla domkniętego dołu."""
    edges = [float(c) for c in cutpoints]
    if len(edges) < 2:
        raise ValueError("Potrzeba co najmniej dwóch punktów cięcia")
    if any(b <= a for a, b in zip(edges, edges[1:])):
        raise ValueError(f"Punkty cięcia muszą być ściśle rosnące: {list(cutpoints)}")
    labels = [f"({_fmt_edge(a)},{_fmt_edge(b)}]" for a, b in zip(edges, edges[1:])]
    if include_lowest:
        labels[0] = "[" + labels[0][1:]
    return labels


def locate_bins(values, cutpoints, include_lowest: bool = False) -> np.ndarray:
    """Indeks przedziału dla każdej wartości; -1 gdy wartość jest poza zakresem (lub NaN)."""
    edges = np.asarray(cutpoints, dtype=float)
    v = np.asarray(values, dtype=float)
    # edges[i-1] < v <= edges[i]  ->  przedział i-1
    idx = np.searchsorted(edges, v, side="left") - 1
    if include_lowest:
        idx = np.where(v == edges[0], 0, idx)
    bad = np.isnan(v) | (idx < 0) | (idx >= len(edges) - 1)
    return np.where(bad, -1, idx)


def cut_column(s: pd.Series, cutpoints, include_lowest: bool = False, field: str | None = None) -> pd.Series:
    labels = np.array(bin_labels(cutpoints, include_lowest), dtype=object)
    idx = locate_bins(s.to_numpy(dtype=float, na_value=np.nan), cutpoints, include_lowest)
    bad = idx < 0
    if bad.any():
        raise OutOfRangeError(field or str(s.name), s[bad].tolist())
    return pd.Series(labels[idx], index=s.index, name=s.name, dtype=object)


def add_bins(df: pd.DataFrame, rules) -> pd.DataFrame:
    out = df.copy()
    for r in rules:
        if r.source not in out.columns:
            raise SystemExit(f"Brak kolumny {r.source} do podziału na przedziały")
        out[r.target] = cut_column(out[r.source], r.cutpoints, r.include_lowest, field=r.source)
    return out
