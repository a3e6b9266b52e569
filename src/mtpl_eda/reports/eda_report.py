from __future__ import annotations
from pathlib import Path
import base64, io, json, zipfile
import pandas as pd

from mtpl_eda.settings import RunParams, load_params
from mtpl_eda.eda.summaries import portfolio_totals, describe_table, claim_count_distribution, one_way
from mtpl_eda.eda.plots import level_order, one_way_columns

CSS = """
<style>
body { font: 14px/1.4 system-ui, sans-serif; margin: 24px; }
h1,h2 { margin-top: 28px; }
table { border-collapse: collapse; margin: 10px 0; }
th, td { padding: 6px 10px; border-bottom: 1px solid #ddd; }
.grid { display: grid; gap: 20px; grid-template-columns: repeat(auto-fit, minmax(320px, 1fr)); }
.imgbox { border:1px solid #eee; padding:10px; }
.muted { color:#666; font-size:12px; }
</style>
"""

# sekcje raportu: (tytuł, prefiks nazw PNG)
PLOT_SECTIONS = [
    ("Univariate distributions", ("hist_", "bar_")),
    ("Observed frequency by level", ("freq_by_",)),
    ("Distributions by claim status", ("facet_",)),
    ("Claim amount tail", ("power_law_",)),
    ("Pairs plot", ("pairs_",)),
]


def _img_b64(p: Path) -> str:
    if not p.exists():
        return ""
    data = p.read_bytes()
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def _tbl_html(df: pd.DataFrame, max_rows=20, index=False) -> str:
    return df.head(max_rows).to_html(index=index, border=0, float_format=lambda v: f"{v:,.4f}")


def _read_json(p: Path):
    return json.loads(p.read_text(encoding="utf-8")) if p.exists() else None


def build_html(df: pd.DataFrame, params: RunParams, validation: dict | None = None,
               tail_fit: dict | None = None) -> str:
    adir = params.report_dir
    html = io.StringIO()
    html.write("<!doctype html><html><head><meta charset='utf-8'><title>freMTPL exploration</title>")
    html.write(CSS)
    html.write("</head><body>")
    html.write("<h1>freMTPL – exploratory data report</h1>")

    html.write("<h2>Inputs</h2><ul>")
    for name in ("policy", "claims", "policy_claim"):
        p = params.processed_dir / f"{name}.parquet"
        if p.exists():
            html.write(f"<li><code>{p.as_posix()}</code> ({p.stat().st_size // 1024} KB)</li>")
    html.write("</ul>")

    html.write("<h2>Portfolio totals</h2>")
    totals = pd.DataFrame([portfolio_totals(df)]).T.reset_index()
    totals.columns = ["metric", "value"]
    html.write(_tbl_html(totals))
    html.write("<p class='muted'>Exposure above 1 year is kept; no outlier filter is applied to this table.</p>")

    html.write("<h2>Validation</h2>")
    if validation is None:
        html.write("<p class='muted'>Brak validation.json – uruchom data/preprocess_french.py</p>")
    else:
        html.write(f"<p>claim_count mismatches: <b>{validation['mismatched_count']}</b>; "
                   f"orphan claim rows: <b>{validation['orphan_rows']}</b></p>")
        if validation["mismatched_ids"]:
            ids = ", ".join(str(i) for i in validation["mismatched_ids"][:50])
            html.write(f"<p class='muted'>Mismatched policy_id (first 50): {ids}</p>")

    html.write("<h2>Descriptive statistics</h2>")
    html.write(_tbl_html(describe_table(df), 50, index=True))
    html.write("<h3>Claim count distribution</h3>")
    html.write(_tbl_html(claim_count_distribution(df)))

    html.write("<h2>One-way tables</h2>")
    order = level_order(params)
    for c in one_way_columns(params):
        if c in df.columns:
            html.write(f"<h3>{c}</h3>")
            html.write(_tbl_html(one_way(df, c, order=order.get(c)), 40))

    if tail_fit:
        html.write("<h2>Claim amount tail fit</h2>")
        html.write(f"<p>Top {tail_fit['n_tail']:,} amounts above {tail_fit['threshold']:,.0f}: "
                   f"log-log slope {tail_fit['slope']:.3f} (alpha ≈ {tail_fit['alpha']:.3f}). "
                   "Diagnostic only.</p>")

    pngs = sorted(adir.glob("*.png"))
    for title, prefixes in PLOT_SECTIONS:
        sel = [p for p in pngs if p.name.startswith(prefixes)]
        if not sel:
            continue
        html.write(f"<h2>{title}</h2><div class='grid'>")
        for p in sel:
            html.write(f"<div class='imgbox'><img src='{_img_b64(p)}' style='max-width:100%'>"
                       f"<div class='muted'>{p.name}</div></div>")
        html.write("</div>")

    html.write(f"<p class='muted'>Auto-generated report. Files placed in {adir.as_posix()}/</p>")
    html.write("</body></html>")
    return html.getvalue()


def write_bundle(html_path: Path, params: RunParams) -> Path:
    out_zip = params.report_dir / "eda_report_bundle.zip"
    with zipfile.ZipFile(out_zip, "w", compression=zipfile.ZIP_DEFLATED) as z:
        z.write(html_path, arcname=html_path.name)
        for p in sorted(params.processed_dir.glob("*.csv")):
            z.write(p, arcname=f"processed/{p.name}")
        for p in sorted(params.report_dir.glob("*.csv")):
            z.write(p, arcname=f"analysis/{p.name}")
        for p in sorted(params.report_dir.glob("*.png")):
            z.write(p, arcname=f"plots/{p.name}")
    return out_zip


def main():
    params = load_params()
    pc_path = params.processed_dir / "policy_claim.parquet"
    if not pc_path.exists():
        raise SystemExit(f"Brak {pc_path}. Najpierw odpal data/preprocess_french.py")
    df = pd.read_parquet(pc_path)

    validation = _read_json(params.processed_dir / "validation.json")
    summary = _read_json(params.report_dir / "eda_summary.json") or {}

    params.report_dir.mkdir(parents=True, exist_ok=True)
    out_html = params.report_dir / "eda_report.html"
    out_html.write_text(build_html(df, params, validation, summary.get("tail_fit")), encoding="utf-8")
    print(f"[OK] HTML -> {out_html}")

    out_zip = write_bundle(out_html, params)
    print(f"[OK] ZIP  -> {out_zip}")


if __name__ == "__main__":
    main()
