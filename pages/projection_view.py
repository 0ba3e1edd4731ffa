"""
Projection page: household profile form, bucket projection charts and table.
"""
from dataclasses import asdict

import streamlit as st

from app_state import initialize_state, get_holdings, get_profile, get_policy, update_profile, update_policy
from charts import create_bucket_balance_chart, create_income_vs_spending_chart, create_withdrawal_chart
from io_utils import (
    create_plan_download_json, export_projection_csv, format_currency,
    parse_plan_upload_json, validate_plan_json,
)
from models import MAX_AGE, MAX_INFLATION_RATE, validate_profile
from projection import run_projection, summarize_projection, projections_to_dataframe


def clamp(value, low, high):
    """Keep a stored value inside the widget range so the widget never rejects it"""
    return min(max(value, low), high)


initialize_state()

st.title("📈 Future Projection")
st.markdown("Simulate your portfolio longevity based on your 3-bucket parameters.")

profile = get_profile()

with st.sidebar:
    st.header("Household Profile")
    current_age = st.number_input("Current age", 0, MAX_AGE, clamp(int(profile.current_age), 0, MAX_AGE))
    retirement_age = st.number_input("Retirement age", 0, MAX_AGE,
                                     clamp(int(profile.retirement_age), 0, MAX_AGE))
    life_expectancy = st.number_input("Plan to age", 0, MAX_AGE,
                                      clamp(int(profile.life_expectancy), 0, MAX_AGE))
    monthly_spending = st.number_input("Monthly spending ($)", 0.0,
                                       value=max(float(profile.monthly_spending), 0.0), step=100.0)
    inflation_rate = st.number_input("Inflation (%)", 0.0, MAX_INFLATION_RATE,
                                     clamp(float(profile.inflation_rate), 0.0, MAX_INFLATION_RATE), step=0.1)

    st.subheader("Social Security")
    social_security_age = st.number_input("Claim age", 0, MAX_AGE,
                                          clamp(int(profile.social_security_age), 0, MAX_AGE))
    social_security_amount = st.number_input("Monthly benefit ($)", 0.0,
                                             value=max(float(profile.social_security_amount), 0.0), step=50.0)

    has_spouse = st.checkbox("Include spouse", value=profile.spouse_age is not None)
    spouse_age = spouse_ss_age = spouse_ss_amount = None
    if has_spouse:
        spouse_age = st.number_input("Spouse age", 0, MAX_AGE,
                                     clamp(int(profile.spouse_age or current_age), 0, MAX_AGE))
        spouse_ss_age = st.number_input("Spouse claim age", 0, MAX_AGE,
                                        clamp(int(profile.spouse_social_security_age or 67), 0, MAX_AGE))
        spouse_ss_amount = st.number_input("Spouse monthly benefit ($)", 0.0,
                                           value=max(float(profile.spouse_social_security_amount or 0.0), 0.0),
                                           step=50.0)

    other_income = st.number_input("Pension / other income ($/mo)", 0.0,
                                   value=max(float(profile.other_income), 0.0), step=50.0)

changes = {
    'current_age': int(current_age),
    'retirement_age': int(retirement_age),
    'life_expectancy': int(life_expectancy),
    'monthly_spending': monthly_spending,
    'inflation_rate': inflation_rate,
    'social_security_age': int(social_security_age),
    'social_security_amount': social_security_amount,
    'spouse_age': spouse_age,
    'spouse_social_security_age': spouse_ss_age,
    'spouse_social_security_amount': spouse_ss_amount,
    'other_income': other_income,
}
if changes != {name: getattr(profile, name) for name in changes}:
    profile = update_profile(changes)

problems = validate_profile(profile)
for problem in problems:
    st.error(problem)
if problems:
    st.stop()

policy = get_policy()
projections = run_projection(profile, policy, get_holdings())
summary = summarize_projection(projections, policy)

col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Spending", f"${profile.monthly_spending/1000:.1f}k/mo")
with col2:
    st.metric("Retire At", int(profile.retirement_age))
with col3:
    st.metric("Plan To", int(profile.life_expectancy))
with col4:
    st.metric("Ending Portfolio", format_currency(summary['end_portfolio'], precision=1))

if not summary['is_sustainable']:
    st.error(f"🚨 The growth bucket runs out at age {summary['depletion_age']}. "
             "Withdrawals are not sustainable under these assumptions.")
elif summary['years_cash_below_target']:
    st.warning(f"⚠️ Cash ends below its target in {summary['years_cash_below_target']} year(s).")

if not projections:
    st.info("ℹ️ No data to project")
    st.stop()

st.plotly_chart(create_bucket_balance_chart(projections), use_container_width=True)

col1, col2 = st.columns(2)
with col1:
    st.plotly_chart(create_income_vs_spending_chart(projections), use_container_width=True)
with col2:
    st.plotly_chart(create_withdrawal_chart(projections), use_container_width=True)

st.subheader("📋 Year-by-Year")
st.dataframe(projections_to_dataframe(projections), use_container_width=True, hide_index=True)

col1, col2 = st.columns(2)
with col1:
    st.download_button("📊 Download projection CSV", data=export_projection_csv(projections),
                       file_name="bucket_projection.csv", mime="text/csv")
with col2:
    st.download_button("💾 Download plan settings", data=create_plan_download_json(profile, policy),
                       file_name="bucket_plan.json", mime="application/json")

uploaded_plan = st.file_uploader("📂 Load plan settings", type=['json'])
if uploaded_plan is not None:
    plan_text = uploaded_plan.getvalue().decode('utf-8')
    is_valid, message = validate_plan_json(plan_text)
    if not is_valid:
        st.error(f"❌ {message}")
    elif st.button("Apply loaded plan"):
        loaded_profile, loaded_policy = parse_plan_upload_json(plan_text)
        update_profile(asdict(loaded_profile))
        update_policy(asdict(loaded_policy))
        st.rerun()
