"""
Holdings page: import positions, assign buckets, export the table.
"""
import streamlit as st

from app_state import initialize_state, get_holdings, add_holdings, remove_holding, set_bucket
from charts import create_bucket_allocation_chart
from holdings_io import (
    export_holdings_csv, holdings_to_dataframe, load_holdings_file, parse_statement_text,
)
from io_utils import format_currency
from models import BUCKET_LABELS, BUCKET_TYPES, Holding, UNASSIGNED
from projection import aggregate_bucket_balances, find_unassigned_holdings

initialize_state()

st.title("📋 Holdings")

holdings = get_holdings()

# Import
with st.expander("📥 Import holdings", expanded=not holdings):
    uploaded_file = st.file_uploader("CSV or Excel file", type=['csv', 'xlsx'])
    if uploaded_file is not None and st.button("Import file", type="primary"):
        known_accounts = sorted({h.account for h in holdings})
        result = load_holdings_file(uploaded_file.name, uploaded_file.getvalue(), known_accounts)
        for error in result.errors:
            st.error(error)
        if result.holdings:
            add_holdings(result.holdings)
            st.success(f"✅ Imported {len(result.holdings)} holdings")
            if result.new_accounts:
                st.info(f"New accounts: {', '.join(result.new_accounts)}")
            st.rerun()

    statement_text = st.text_area("Or paste statement text", height=150)
    if statement_text and st.button("Parse statement"):
        parsed = parse_statement_text(statement_text)
        if parsed:
            add_holdings(parsed)
            st.success(f"✅ Found {len(parsed)} positions")
            st.rerun()
        else:
            st.warning("No positions recognized in the pasted text")

# Manual entry
with st.expander("➕ Add holding"):
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        ticker = st.text_input("Ticker").strip().upper()
    with col2:
        quantity = st.number_input("Quantity", min_value=0.0, value=0.0)
    with col3:
        price = st.number_input("Price", min_value=0.0, value=1.0)
    with col4:
        bucket = st.selectbox("Bucket", BUCKET_TYPES, format_func=BUCKET_LABELS.get,
                              index=BUCKET_TYPES.index(UNASSIGNED))
    if ticker and st.button("Add"):
        add_holdings([Holding(ticker=ticker, name=ticker, quantity=quantity,
                              current_price=price, bucket=bucket, is_manual_price=True)])
        st.rerun()

if not holdings:
    st.info("ℹ️ No holdings yet. Import a file or add a position to get started.")
    st.stop()

# Action needed
unassigned = find_unassigned_holdings(holdings)
if unassigned:
    st.warning("⚠️ Action needed: these holdings have no bucket and are excluded "
               f"from the projection: {', '.join(h.ticker for h in unassigned)}")

col1, col2 = st.columns([2, 1])
with col1:
    st.dataframe(holdings_to_dataframe(holdings), use_container_width=True, hide_index=True)
with col2:
    balances = aggregate_bucket_balances(holdings)
    unassigned_value = sum(h.market_value for h in unassigned)
    st.plotly_chart(create_bucket_allocation_chart(balances, unassigned_value),
                    use_container_width=True)
    st.metric("Total", format_currency(balances.total + unassigned_value, precision=2))

# Edit
st.subheader("Assign buckets")
for idx, holding in enumerate(holdings):
    col1, col2, col3 = st.columns([2, 2, 1])
    with col1:
        st.write(f"**{holding.ticker}** · {holding.account} · "
                 f"{format_currency(holding.market_value, precision=1)}")
    with col2:
        choice = st.selectbox("Bucket", BUCKET_TYPES, key=f"bucket_{idx}",
                              index=BUCKET_TYPES.index(holding.bucket),
                              format_func=BUCKET_LABELS.get, label_visibility="collapsed")
        if choice != holding.bucket:
            set_bucket(idx, choice)
            st.rerun()
    with col3:
        if st.button("🗑️", key=f"remove_{idx}"):
            remove_holding(idx)
            st.rerun()

st.download_button(
    "💾 Export holdings CSV",
    data=export_holdings_csv(holdings),
    file_name="holdings.csv",
    mime="text/csv",
)
