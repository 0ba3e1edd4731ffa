"""
Buckets page: reserve targets, expected returns and current coverage.
"""
import streamlit as st

from app_state import initialize_state, get_holdings, get_profile, get_policy, update_policy
from io_utils import format_currency
from models import MAX_CASH_TARGET_YEARS, MAX_INCOME_TARGET_YEARS, validate_policy
from projection import aggregate_bucket_balances, bucket_coverage

initialize_state()

st.title("🪣 Bucket Strategy")
st.markdown("Adjust your target duration and expected returns.")

policy = get_policy()

col1, col2 = st.columns(2)
with col1:
    st.subheader("Target Reserves")
    cash_target_years = st.slider("Bucket 1 (Cash) Target (years)", 0.5, MAX_CASH_TARGET_YEARS,
                                  min(max(float(policy.cash_target_years), 0.5), MAX_CASH_TARGET_YEARS),
                                  step=0.5)
    income_target_years = st.slider("Bucket 2 (Income) Target (years)", 1.0, MAX_INCOME_TARGET_YEARS,
                                    min(max(float(policy.income_target_years), 1.0), MAX_INCOME_TARGET_YEARS),
                                    step=0.5)
with col2:
    st.subheader("Expected Returns (%)")
    cash_return = st.number_input("Cash", value=float(policy.cash_return), step=0.1)
    income_return = st.number_input("Income", value=float(policy.income_return), step=0.1)
    growth_return = st.number_input("Growth", value=float(policy.growth_return), step=0.1)

changes = {
    'cash_target_years': cash_target_years,
    'income_target_years': income_target_years,
    'cash_return': cash_return,
    'income_return': income_return,
    'growth_return': growth_return,
}
if any(getattr(policy, name) != value for name, value in changes.items()):
    policy = update_policy(changes)

for problem in validate_policy(policy):
    st.error(problem)

st.markdown("---")
st.subheader("Current Coverage")

balances = aggregate_bucket_balances(get_holdings())
profile = get_profile()
coverage = bucket_coverage(balances, profile, policy)

col1, col2 = st.columns(2)
for col, bucket, label in ((col1, 'cash', "Bucket 1 (Cash)"), (col2, 'income', "Bucket 2 (Income)")):
    info = coverage[bucket]
    with col:
        st.metric(label, f"{info['years']:.1f} years", format_currency(info['balance'], precision=1))
        st.progress(info['pct_of_target'])
        st.caption(f"Target: {info['target_years']:g} years of spending "
                   f"({format_currency(info['target_amount'], precision=1)})")

if profile.monthly_spending == 0:
    st.info("ℹ️ Set a monthly spending target on the Projection page to size the buckets.")
elif not coverage['cash']['meets_target']:
    st.warning("Cash bucket is below target. Consider selling Bucket 3 (Growth) assets if the "
               "market is up, or Bucket 2 (Income) if needed.")
else:
    st.success("✅ Cash bucket is fully funded.")
