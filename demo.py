#!/usr/bin/env python3
"""
Demo script showing how to use the bucket planner modules programmatically.
This demonstrates the projection engine without the Streamlit UI.

Usage:
    python demo.py                   # built-in sample portfolio
    python demo.py holdings.csv      # holdings exported from the app
    python demo.py holdings.csv plan.json
"""

import logging
import sys

from config_utils import get_default_profile, get_default_policy, setup_logging
from holdings_io import parse_holdings_csv
from io_utils import create_plan_download_json, format_currency, parse_plan_upload_json
from models import Holding, CASH, INCOME, GROWTH
from projection import run_projection, summarize_projection, bucket_coverage, aggregate_bucket_balances

logger = logging.getLogger(__name__)

SAMPLE_HOLDINGS = [
    Holding(ticker='SPAXX', name='Fidelity Government Money Market', quantity=150_000,
            current_price=1.0, bucket=CASH, asset_type='cash'),
    Holding(ticker='BND', name='Vanguard Total Bond Market ETF', quantity=5_000,
            current_price=72.40, bucket=INCOME, asset_type='etf'),
    Holding(ticker='SCHD', name='Schwab US Dividend Equity ETF', quantity=3_000,
            current_price=78.40, bucket=INCOME, asset_type='etf'),
    Holding(ticker='VTI', name='Vanguard Total Stock Market ETF', quantity=4_000,
            current_price=242.50, bucket=GROWTH, asset_type='etf'),
]


def load_inputs(argv):
    holdings = SAMPLE_HOLDINGS
    profile, policy = get_default_profile(), get_default_policy()

    if len(argv) > 1:
        with open(argv[1], 'r') as f:
            result = parse_holdings_csv(f.read())
        for error in result.errors:
            logger.warning("Holdings import: %s", error)
        holdings = result.holdings

    if len(argv) > 2:
        with open(argv[2], 'r') as f:
            profile, policy = parse_plan_upload_json(f.read())

    return holdings, profile, policy


def main(argv=None):
    setup_logging(logging.INFO)
    holdings, profile, policy = load_inputs(argv if argv is not None else sys.argv)

    print("🪣 Bucket Projection Demo")
    print("=" * 50)

    balances = aggregate_bucket_balances(holdings)
    print(f"\n📊 Starting buckets ({len(holdings)} holdings):")
    print(f"   Cash:   {format_currency(balances.cash, precision=1)}")
    print(f"   Income: {format_currency(balances.income, precision=1)}")
    print(f"   Growth: {format_currency(balances.growth, precision=1)}")

    coverage = bucket_coverage(balances, profile, policy)
    for bucket in (CASH, INCOME):
        info = coverage[bucket]
        status = "✅" if info['meets_target'] else "⚠️"
        print(f"   {status} {bucket}: {info['years']:.1f} of {info['target_years']:g} target years")

    projections = run_projection(profile, policy, holdings)
    summary = summarize_projection(projections, policy)

    print(f"\n📈 Projection age {profile.current_age} to {profile.life_expectancy}:")
    print(f"   Ending portfolio: {format_currency(summary['end_portfolio'], precision=2)}")
    print(f"   Total withdrawals: {format_currency(summary['total_withdrawals'], precision=2)}")
    print(f"   Refills from growth / income: {summary['refills_from_growth']} / {summary['refills_from_income']}")
    if summary['is_sustainable']:
        print("   ✅ Plan is sustainable under these assumptions")
    else:
        print(f"   🚨 Growth bucket goes negative at age {summary['depletion_age']}")

    print(f"\n📋 Year-by-Year (First 10 Years):")
    print(f"   {'Age':<5} {'Withdrawal':>11} {'Cash':>10} {'Income':>10} {'Growth':>11}  Action")
    for p in projections[:10]:
        print(f"   {p.age:<5} ${p.withdrawal_needed/1000:>9,.0f}K ${p.end_balance_cash/1000:>8,.0f}K "
              f"${p.end_balance_income/1000:>8,.0f}K ${p.end_balance_growth/1000:>9,.0f}K  {p.action}")

    json_plan = create_plan_download_json(profile, policy)
    print(f"\n💾 Plan settings export: {len(json_plan)} characters")

    print(f"\n✅ Demo completed successfully!")
    print(f"   To run the full Streamlit UI: streamlit run main.py")
    print(f"   To run tests: python3 -m pytest tests/ -v")


if __name__ == "__main__":
    main()
