from __future__ import annotations
from pathlib import Path
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from pandas.plotting import scatter_matrix

from mtpl_eda.settings import RunParams
from mtpl_eda.features.binning import bin_labels
from mtpl_eda.eda.summaries import one_way, tail_curve

HIST_COLS = ["exposure", "driver_age", "car_age"]
BAR_COLS = ["claim_count", "power", "brand", "fuel", "region"]
FACET_COLS = ["driver_age", "car_age", "density", "exposure"]
PAIRS_COLS = ["exposure", "driver_age", "car_age", "density", "claim_count"]


def save_plot(fig, out_dir: Path, name: str) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    p = out_dir / f"{name}.png"
    fig.savefig(p, bbox_inches="tight", dpi=140)
    plt.close(fig)
    print(f"[PNG] {p}")
    return p


def level_order(params: RunParams) -> dict:
    # kolejność etykiet przedziałów tylko do wyświetlania
    return {r.target: bin_labels(r.cutpoints, r.include_lowest) for r in params.bins}


def one_way_columns(params: RunParams) -> list[str]:
    return ["power", "brand", "fuel", "region"] + \
           [r.target for r in params.bins] + [r.target for r in params.collapse]


def univariate(df: pd.DataFrame, out_dir: Path, params: RunParams) -> list[Path]:
    out = []
    for c in HIST_COLS:
        fig = plt.figure()
        plt.hist(df[c].dropna(), bins=50)
        plt.xlabel(c)
        plt.ylabel("Policies")
        plt.title(f"Distribution of {c}")
        out.append(save_plot(fig, out_dir, f"hist_{c}"))

    fig = plt.figure()
    plt.hist(np.log10(df["density"].clip(lower=1)), bins=50)
    plt.xlabel("log10(density)")
    plt.ylabel("Policies")
    plt.title("Distribution of density (log scale)")
    out.append(save_plot(fig, out_dir, "hist_log_density"))

    paid = df.loc[df["total_claims"] > 0, "total_claims"]
    if len(paid):
        fig = plt.figure()
        plt.hist(np.log10(paid), bins=60)
        plt.xlabel("log10(total claim amount)")
        plt.ylabel("Policies with claims")
        plt.title("Claim amount per policy (log scale)")
        out.append(save_plot(fig, out_dir, "hist_log_total_claims"))

    order = level_order(params)
    derived = [r.target for r in params.bins] + [r.target for r in params.collapse]
    for c in BAR_COLS + derived:
        if c not in df.columns:
            continue
        vc = df[c].value_counts(dropna=False)
        if c in order:
            vc = vc.reindex(order[c], fill_value=0)
        else:
            vc = vc.sort_index()
        fig = plt.figure(figsize=(8, 4))
        x = np.arange(len(vc))
        plt.bar(x, vc.to_numpy())
        plt.xticks(x, vc.index.astype(str), rotation=45, ha="right")
        plt.ylabel("Policies")
        plt.title(f"Policies by {c}")
        out.append(save_plot(fig, out_dir, f"bar_{c}"))
    return out


def bivariate(df: pd.DataFrame, out_dir: Path, params: RunParams) -> list[Path]:
    """Częstość obserwowana (szkody / ekspozycja) i ekspozycja per poziom."""
    out = []
    order = level_order(params)
    for c in one_way_columns(params):
        if c not in df.columns:
            continue
        tab = one_way(df, c, order=order.get(c))
        fig, ax1 = plt.subplots(figsize=(9, 4))
        x = np.arange(len(tab))
        ax1.bar(x, tab["exposure"], color="lightgray", label="exposure")
        ax1.set_ylabel("Exposure (years)")
        ax2 = ax1.twinx()
        ax2.plot(x, tab["frequency"], marker="o", color="tab:red", label="observed frequency")
        ax2.set_ylabel("Claim frequency")
        ax1.set_xticks(x)
        ax1.set_xticklabels(tab[c].astype(str), rotation=45, ha="right")
        ax1.set_title(f"Observed frequency by {c}")
        out.append(save_plot(fig, out_dir, f"freq_by_{c}"))
    return out


def claim_facets(df: pd.DataFrame, out_dir: Path) -> list[Path]:
    out = []
    has_claim = df["claim_count"] > 0
    for c in FACET_COLS:
        fig, axes = plt.subplots(1, 2, figsize=(10, 4), sharex=True)
        for ax, mask, title in ((axes[0], ~has_claim, "no claim"), (axes[1], has_claim, "has claim")):
            vals = df.loc[mask, c].dropna()
            if c == "density":
                vals = np.log10(vals.clip(lower=1))
            ax.hist(vals, bins=40, density=True)
            ax.set_title(f"{title} (n={int(mask.sum()):,})")
            ax.set_xlabel("log10(density)" if c == "density" else c)
        axes[0].set_ylabel("Density")
        fig.suptitle(f"{c} by claim status")
        out.append(save_plot(fig, out_dir, f"facet_{c}"))
    return out


def power_law(amounts, out_dir: Path) -> tuple[list[Path], dict]:
    curve, fit = tail_curve(amounts)
    fig = plt.figure()
    plt.scatter(curve["log_amount"], curve["log_survival"], s=4, alpha=0.5, label="empirical")
    xs = np.linspace(np.log(fit["threshold"]), curve["log_amount"].max(), 50)
    plt.plot(xs, fit["intercept"] + fit["slope"] * xs, color="tab:red",
             label=f"tail fit (alpha={fit['alpha']:.2f})")
    plt.xlabel("log(claim amount)")
    plt.ylabel("log(P(X > x))")
    plt.title("Claim amount tail (log-log)")
    plt.legend()
    return [save_plot(fig, out_dir, "power_law_tail")], fit


def pairs(df: pd.DataFrame, out_dir: Path, params: RunParams) -> list[Path]:
    cols = [c for c in PAIRS_COLS if c in df.columns]
    sample = df[cols].sample(min(params.pairs_sample, len(df)), random_state=params.seed)
    axes = scatter_matrix(sample, figsize=(10, 10), alpha=0.3, s=6, diagonal="hist")
    fig = axes[0, 0].get_figure()
    fig.suptitle(f"Pairs plot (sample n={len(sample):,}, seed={params.seed})")
    return [save_plot(fig, out_dir, "pairs_sample")]


def make_all(df: pd.DataFrame, claims: pd.DataFrame | None, params: RunParams) -> tuple[list[Path], dict | None]:
    out_dir = params.report_dir
    files = []
    files += univariate(df, out_dir, params)
    files += bivariate(df, out_dir, params)
    files += claim_facets(df, out_dir)
    fit = None
    amounts = claims["claim_amount"] if claims is not None else df["total_claims"]
    if (amounts > 0).sum() >= 3:
        p, fit = power_law(amounts, out_dir)
        files += p
    files += pairs(df, out_dir, params)
    return files, fit
