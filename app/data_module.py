# data_module.py
import streamlit as st
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from mtpl_eda.settings import load_params
from mtpl_eda.eda.summaries import portfolio_totals, describe_table, one_way
from mtpl_eda.eda.plots import level_order, one_way_columns


@st.cache_data
def load_policy_claim(path: str) -> pd.DataFrame:
    return pd.read_parquet(path)


def show_data_module():
    st.header("Moduł danych")
    params = load_params()
    path = params.processed_dir / "policy_claim.parquet"
    if not path.exists():
        st.info(f"Brak {path}. Uruchom najpierw: python -m mtpl_eda.data.preprocess_french")
        return
    df = load_policy_claim(str(path))

    # Podstawowe liczby portfela
    totals = portfolio_totals(df)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Polisy", f"{totals['policies']:,}")
    c2.metric("Ekspozycja (lata)", f"{totals['exposure_sum']:,.0f}")
    c3.metric("Szkody", f"{totals['claims_sum']:,}")
    c4.metric("Częstość", f"{totals['frequency']:.4f}")
    if totals["exposure_gt_1"]:
        st.caption(f"{totals['exposure_gt_1']} polis z ekspozycją > 1 rok (pozostają w danych).")

    st.subheader("Podgląd danych")
    st.dataframe(df.head(200), use_container_width=True)

    st.subheader("Podstawowe statystyki")
    st.table(describe_table(df))

    # Analiza jednowymiarowa: ekspozycja + częstość obserwowana
    order = level_order(params)
    cols = [c for c in one_way_columns(params) if c in df.columns]
    selected_col = st.selectbox("Wybierz kolumnę do analizy:", options=cols)
    if selected_col:
        tab = one_way(df, selected_col, order=order.get(selected_col))
        x = tab[selected_col].astype(str)
        fig = make_subplots(specs=[[{"secondary_y": True}]])
        fig.add_trace(go.Bar(x=x, y=tab["exposure"], name="Ekspozycja"), secondary_y=False)
        fig.add_trace(go.Scatter(x=x, y=tab["frequency"], name="Częstość", mode="lines+markers"),
                      secondary_y=True)
        fig.update_layout(xaxis_title=selected_col, bargap=0.1)
        fig.update_yaxes(title_text="Ekspozycja", secondary_y=False)
        fig.update_yaxes(title_text="Częstość szkód", secondary_y=True)
        st.plotly_chart(fig, use_container_width=True)
        st.table(tab)
