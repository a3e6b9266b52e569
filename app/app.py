import streamlit as st

from data_module import show_data_module
from reports_module import show_reports_module

st.set_page_config(page_title="freMTPL – eksploracja danych", layout="wide")
st.title("Eksploracja danych freMTPL (polisy i szkody)")

tabs = st.tabs(["Data", "Reports"])
with tabs[0]:
    show_data_module()
with tabs[1]:
    show_reports_module()
