"""
app.py
======
Quarterly Financials — Streamlit dashboard over the imported time series.

Sidebar: metric, category filter, companies.
Main:    metric chart per company, company × quarter table,
         company notes, chart colours, company removal.

Run:  streamlit run app.py
"""

from typing import Dict, List

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from fin_quarterly.config import load_config
from fin_quarterly.exceptions import CompanyNotFoundError
from fin_quarterly.formatting import company_color, format_metric_value, metric_label, metric_unit
from fin_quarterly.frames import metric_frame, pivot_metric
from fin_quarterly.log import configure_logging
from fin_quarterly.repository import QuarterRepository
from fin_quarterly.types import METRIC_SLOTS, CompanyMetric, QuarterKey

# ─── Page Configuration ───────────────────────────────────────────────────────

st.set_page_config(
    page_title="Quarterly Financials",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .main-header {
        background: linear-gradient(135deg, #1e40af 0%, #3730a3 100%);
        border-radius: 12px;
        padding: 1.2rem 1.5rem;
        color: white;
        margin-bottom: 1.5rem;
    }
    .main-header h1 { margin: 0; font-size: 1.6rem; font-weight: 700; }
    .main-header p  { margin: 0.25rem 0 0; font-size: 0.85rem; opacity: 0.85; }
</style>
""", unsafe_allow_html=True)


# ─── Repository ───────────────────────────────────────────────────────────────

@st.cache_resource
def _repository() -> QuarterRepository:
    cfg = load_config()
    configure_logging(cfg.log_level)
    repo = QuarterRepository.from_url(cfg.database_url)
    repo.create_schema()
    return repo


repo = _repository()


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _build_line(rows: List[CompanyMetric], metric: str, colors: Dict[str, str]) -> go.Figure:
    df = metric_frame(rows).dropna(subset=["value"])
    periods = [str(k) for k in sorted({QuarterKey(r.year, r.quarter) for r in rows})]
    unit = metric_unit(metric)
    fig = go.Figure()
    for company, grp in df.groupby("company", sort=True):
        fig.add_trace(go.Scatter(
            x=grp["period"], y=grp["value"],
            name=company, mode="lines+markers",
            line=dict(color=company_color(company, colors), width=2.5),
            marker=dict(size=7),
            hovertemplate="%{x}<br>%{y:,.2f}" + unit + "<extra>" + company + "</extra>",
        ))
    fig.update_layout(
        title=dict(text=f"{metric_label(metric)} Comparison", font=dict(size=14, color="#1e293b")),
        yaxis_title=metric_label(metric),
        xaxis_title="Quarter",
        paper_bgcolor="white", plot_bgcolor="#f8fafc",
        margin=dict(l=40, r=20, t=40, b=30),
        height=480, legend=dict(orientation="h", y=-0.2),
        font=dict(family="sans-serif", size=11, color="#64748b"),
        xaxis=dict(gridcolor="#e2e8f0", categoryorder="array", categoryarray=periods),
        yaxis=dict(gridcolor="#e2e8f0"),
    )
    return fig


def _formatted_table(rows: List[CompanyMetric], metric: str) -> pd.DataFrame:
    table = pivot_metric(rows)
    return table.apply(lambda col: col.map(
        lambda v: format_metric_value(metric, None if pd.isna(v) else float(v))
    ))


# ─── Sidebar ──────────────────────────────────────────────────────────────────

with st.sidebar:
    st.markdown("### Filters")
    metric = st.selectbox("Metric", list(METRIC_SLOTS), format_func=metric_label)

    categories = repo.get_all_categories()
    category = st.selectbox("Category", ["All"] + categories)

    infos = repo.get_companies_with_categories()
    available = sorted({i.company for i in infos if category == "All" or i.category == category})
    companies = st.multiselect("Companies", available, default=available)


# ─── Main ─────────────────────────────────────────────────────────────────────

st.markdown(
    '<div class="main-header"><h1>Quarterly Financials</h1>'
    '<p>Imported statement exports, one series per company</p></div>',
    unsafe_allow_html=True,
)

if not companies:
    st.info("No companies imported yet. Run `fin-quarterly import <path>` first.")
    st.stop()

rows = repo.get_companies_metric(companies, metric)
colors = repo.get_company_colors()

if any(r.value is not None for r in rows):
    st.plotly_chart(_build_line(rows, metric, colors), width='stretch')
    st.dataframe(_formatted_table(rows, metric), width='stretch')
else:
    st.warning(f"No {metric_label(metric)} values for the selected companies.")


# ─── Company Settings ─────────────────────────────────────────────────────────

st.markdown("### Company")
selected = st.selectbox("Company", companies)

note_col, color_col = st.columns([3, 1])
with note_col:
    note = st.text_area("Note", value=repo.get_company_note(selected), key=f"note_{selected}")
    save_note, clear_note = st.columns(2)
    if save_note.button("Save note"):
        repo.save_company_note(selected, note)
        st.success("Note saved")
    if clear_note.button("Delete note"):
        repo.delete_company_note(selected)
        st.rerun()

with color_col:
    color = st.color_picker("Chart colour", value=company_color(selected, colors), key=f"color_{selected}")
    save_color, reset_color = st.columns(2)
    if save_color.button("Save colour"):
        repo.save_company_color(selected, color)
        st.rerun()
    if reset_color.button("Reset colour"):
        repo.delete_company_color(selected)
        st.rerun()

with st.expander("Danger zone"):
    confirm = st.checkbox(f"I want to delete every quarter of {selected}")
    if st.button("Delete company", disabled=not confirm):
        try:
            deleted = repo.delete_company(selected)
        except CompanyNotFoundError as exc:
            st.error(str(exc))
        else:
            st.success(f"Deleted {deleted} quarter rows for {selected}")
            st.rerun()
