# reports_module.py
import streamlit as st

from mtpl_eda.settings import load_params


def show_reports_module():
    st.header("Moduł raportów")
    params = load_params()
    adir = params.report_dir

    html_path = adir / "eda_report.html"
    if html_path.exists():
        st.download_button("Pobierz raport HTML", data=html_path.read_bytes(),
                           file_name=html_path.name, mime="text/html")
    else:
        st.info("Brak raportu HTML. Uruchom: python -m mtpl_eda.reports.eda_report")

    pngs = sorted(adir.glob("*.png")) if adir.exists() else []
    if not pngs:
        st.info("Brak wykresów. Uruchom: python -m mtpl_eda.eda.inspect_french")
        return
    selected = st.multiselect("Wykresy:", options=[p.name for p in pngs], default=[pngs[0].name])
    for name in selected:
        st.image(str(adir / name), caption=name)
