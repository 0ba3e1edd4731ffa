"""
Bucket Planner - Main Application Entry Point

A Streamlit multipage application for three-bucket retirement planning:
- Holdings import and bucket assignment
- Bucket policy targets and coverage
- Year-by-year projection of the cash, income and growth buckets
"""

import streamlit as st

from app_state import initialize_state, get_holdings, get_profile, get_policy
from config_utils import APP_PAGES, load_ui_config, setup_logging
from io_utils import format_currency
from projection import aggregate_bucket_balances, find_unassigned_holdings


def start_page():
    """Start page content"""
    initialize_state()

    st.title("🪣 Bucket Planner")

    st.markdown("""
    ### Three-Bucket Retirement Dashboard

    Spend from **Bucket 1 (Cash)**, keep **Bucket 2 (Income)** as the next line of
    defense and let **Bucket 3 (Growth)** compound and refill cash over time.
    """)

    holdings = get_holdings()
    profile = get_profile()
    balances = aggregate_bucket_balances(holdings)
    total_value = sum(h.market_value for h in holdings)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Portfolio", format_currency(total_value, precision=2))
    with col2:
        st.metric("Holdings", len(holdings))
    with col3:
        st.metric("Plan To Age", profile.life_expectancy)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Cash", format_currency(balances.cash, precision=1))
    with col2:
        st.metric("Income", format_currency(balances.income, precision=1))
    with col3:
        st.metric("Growth", format_currency(balances.growth, precision=1))

    unassigned = find_unassigned_holdings(holdings)
    if unassigned:
        st.warning(f"⚠️ {len(unassigned)} holding(s) are not assigned to a bucket "
                   "and are left out of the projection.")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("📋 Manage Holdings", type="secondary"):
            st.switch_page("pages/holdings_view.py")
    with col2:
        if st.button("📈 View Projection", type="primary"):
            st.switch_page("pages/projection_view.py")

    policy = get_policy()
    st.markdown("---")
    st.caption(f"Buckets target {policy.cash_target_years:g} years of spending in cash and "
               f"{policy.income_target_years:g} years in income.")


config = load_ui_config()
setup_logging(config.get('log_level', 'INFO'))

st.set_page_config(
    page_title="Bucket Planner",
    page_icon="🪣",
    layout="wide",
    initial_sidebar_state="expanded"
)

pages = [st.Page(start_page, title="Dashboard", icon="🏠")]
pages += [st.Page(page['path'], title=page['title'], icon=page['icon']) for page in APP_PAGES]

pg = st.navigation(pages)
pg.run()
