"""
Three-bucket decumulation projection.
Pure functions: holdings + profile + policy in, year-by-year records out.
"""
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from models import (
    CASH, INCOME, GROWTH, UNASSIGNED,
    BucketBalances, BucketPolicy, Holding, HouseholdProfile, YearlyProjection,
)

logger = logging.getLogger(__name__)

# Growth must hold more than this multiple of a cash shortfall before it refills cash
REFILL_SAFETY_MULTIPLE = 2.0

SOURCE_CASH = "Cash Bucket"
SOURCE_CASH_THEN_INCOME = "Cash (Depleted) -> Income"
SOURCE_ALL_BUCKETS = "Cash -> Income -> Growth"

ACTION_REFILL_FROM_GROWTH = "Refill Cash from Growth"
ACTION_REFILL_FROM_INCOME = "Refill Cash from Income"


def aggregate_bucket_balances(holdings: Iterable[Holding]) -> BucketBalances:
    """
    Sum market value per bucket. Unassigned holdings are left out.

    Args:
        holdings: Priced holdings tagged with a bucket

    Returns:
        Starting BucketBalances for a projection
    """
    totals = {CASH: 0.0, INCOME: 0.0, GROWTH: 0.0}
    for holding in holdings:
        if holding.bucket in totals:
            totals[holding.bucket] += holding.quantity * holding.current_price
    return BucketBalances(cash=totals[CASH], income=totals[INCOME], growth=totals[GROWTH])


def find_unassigned_holdings(holdings: Iterable[Holding]) -> List[Holding]:
    """Holdings that need a bucket before they count toward the projection"""
    return [h for h in holdings if h.bucket == UNASSIGNED]


def inflation_multiplier(inflation_rate: float, year_index: int) -> float:
    return (1 + inflation_rate / 100) ** year_index


def annual_spending_need(profile: HouseholdProfile, year_index: int) -> float:
    """Nominal spending need for the given year offset"""
    return profile.monthly_spending * 12 * inflation_multiplier(profile.inflation_rate, year_index)


def guaranteed_income(profile: HouseholdProfile, year_index: int) -> float:
    """
    Income that does not come from the portfolio.

    Other income is flat; Social Security (primary and spouse) is inflation
    adjusted and only paid once the claim age is reached.
    """
    multiplier = inflation_multiplier(profile.inflation_rate, year_index)
    income = profile.other_income * 12

    age = profile.current_age + year_index
    if age >= profile.social_security_age:
        income += profile.social_security_amount * 12 * multiplier

    if profile.has_spouse_benefit:
        spouse_age = profile.spouse_age + year_index
        if spouse_age >= profile.spouse_social_security_age:
            income += profile.spouse_social_security_amount * 12 * multiplier

    return income


def apply_withdrawal_waterfall(balances: BucketBalances,
                               amount: float) -> Tuple[BucketBalances, str]:
    """
    Draw a withdrawal from cash, then income, then growth.

    Cash and income are never drawn below zero. Whatever they cannot cover
    comes out of growth, which is allowed to go negative.

    Returns:
        (balances after withdrawal, withdrawal source label)
    """
    cash, income, growth = balances.cash, balances.income, balances.growth

    if cash >= amount:
        return BucketBalances(cash - amount, income, growth), SOURCE_CASH

    remaining = amount - cash
    if income >= remaining:
        return BucketBalances(0.0, income - remaining, growth), SOURCE_CASH_THEN_INCOME

    remaining -= income
    return BucketBalances(0.0, 0.0, growth - remaining), SOURCE_ALL_BUCKETS


def apply_bucket_growth(balances: BucketBalances, policy: BucketPolicy) -> BucketBalances:
    """Apply each bucket's annual return to its balance"""
    return BucketBalances(
        cash=balances.cash * (1 + policy.cash_return / 100),
        income=balances.income * (1 + policy.income_return / 100),
        growth=balances.growth * (1 + policy.growth_return / 100),
    )


def refill_cash_bucket(balances: BucketBalances,
                       target_cash: float) -> Tuple[BucketBalances, str]:
    """
    Top the cash bucket back up to its target.

    Growth pays for the refill only while it holds more than
    REFILL_SAFETY_MULTIPLE times the shortfall; otherwise income pays if it
    can cover the whole shortfall. If neither can, nothing moves.

    Returns:
        (balances after refill, action label or "")
    """
    if balances.cash >= target_cash:
        return balances, ""

    shortfall = target_cash - balances.cash

    # Cash is set to the target itself; cash + shortfall can round one ulp short
    if balances.growth > shortfall * REFILL_SAFETY_MULTIPLE:
        refilled = BucketBalances(target_cash, balances.income,
                                  balances.growth - shortfall)
        return refilled, ACTION_REFILL_FROM_GROWTH

    if balances.income > shortfall:
        refilled = BucketBalances(target_cash,
                                  balances.income - shortfall, balances.growth)
        return refilled, ACTION_REFILL_FROM_INCOME

    return balances, ""


def project_year(balances: BucketBalances,
                 profile: HouseholdProfile,
                 policy: BucketPolicy,
                 year_index: int,
                 start_year: int) -> Tuple[BucketBalances, YearlyProjection]:
    """
    Advance the buckets by one year.

    Steps run in a fixed order: spending need, guaranteed income, net
    withdrawal, waterfall withdrawal, returns, cash refill.

    Args:
        balances: Bucket balances entering the year
        profile: Household profile
        policy: Bucket policy
        year_index: Years since the projection start (0-based)
        start_year: Calendar year of year_index 0

    Returns:
        (balances leaving the year, the year's projection record)
    """
    spending_need = annual_spending_need(profile, year_index)
    income = guaranteed_income(profile, year_index)
    # Surplus income is not reinvested
    withdrawal_needed = max(0.0, spending_need - income)

    after_withdrawal, withdrawal_source = apply_withdrawal_waterfall(balances, withdrawal_needed)
    after_growth = apply_bucket_growth(after_withdrawal, policy)

    target_cash = spending_need * policy.cash_target_years
    end, action = refill_cash_bucket(after_growth, target_cash)

    record = YearlyProjection(
        year=start_year + year_index,
        age=profile.current_age + year_index,
        spending_need=spending_need,
        income=income,
        withdrawal_needed=withdrawal_needed,
        start_balance_cash=balances.cash,
        start_balance_income=balances.income,
        start_balance_growth=balances.growth,
        end_balance_cash=end.cash,
        end_balance_income=end.income,
        end_balance_growth=end.growth,
        total_portfolio=end.cash + end.income + end.growth,
        withdrawal_source=withdrawal_source,
        action=action,
    )
    return end, record


def run_projection(profile: HouseholdProfile,
                   policy: BucketPolicy,
                   holdings: Iterable[Holding],
                   start_year: Optional[int] = None) -> List[YearlyProjection]:
    """
    Project the three buckets from the current age to life expectancy.

    Args:
        profile: Household profile
        policy: Bucket policy
        holdings: Priced, bucket-tagged holdings
        start_year: Calendar year of the first record (defaults to this year)

    Returns:
        One YearlyProjection per age, current age through life expectancy
        inclusive; empty if life expectancy is below the current age
    """
    if start_year is None:
        start_year = datetime.now().year

    balances = aggregate_bucket_balances(holdings)
    years = profile.life_expectancy - profile.current_age + 1

    logger.debug("Projecting %d years from age %d: cash=%.2f income=%.2f growth=%.2f",
                 max(years, 0), profile.current_age,
                 balances.cash, balances.income, balances.growth)

    projections = []
    for year_index in range(max(years, 0)):
        balances, record = project_year(balances, profile, policy, year_index, start_year)
        projections.append(record)

    depletion_age = find_depletion_age(projections)
    if depletion_age is not None:
        logger.warning("Growth bucket goes negative at age %d; plan is not sustainable",
                       depletion_age)

    return projections


def find_depletion_age(projections: List[YearlyProjection]) -> Optional[int]:
    """First age whose year ends with a negative growth balance"""
    for record in projections:
        if record.end_balance_growth < 0:
            return record.age
    return None


def summarize_projection(projections: List[YearlyProjection],
                         policy: Optional[BucketPolicy] = None) -> Dict:
    """
    Headline numbers for a projection.

    Args:
        projections: Output of run_projection
        policy: Policy used for the run; needed to count years where cash
            ended under its target

    Returns:
        Dictionary of summary statistics
    """
    if not projections:
        return {
            'years': 0,
            'start_portfolio': 0.0,
            'end_portfolio': 0.0,
            'total_withdrawals': 0.0,
            'total_guaranteed_income': 0.0,
            'depletion_age': None,
            'is_sustainable': True,
            'refills_from_growth': 0,
            'refills_from_income': 0,
            'years_cash_below_target': 0,
        }

    first = projections[0]
    last = projections[-1]
    depletion_age = find_depletion_age(projections)
    actions = [p.action for p in projections]

    years_cash_below_target = 0
    if policy is not None:
        years_cash_below_target = sum(
            1 for p in projections
            if p.end_balance_cash < p.spending_need * policy.cash_target_years
        )

    return {
        'years': len(projections),
        'start_portfolio': (first.start_balance_cash + first.start_balance_income
                            + first.start_balance_growth),
        'end_portfolio': last.total_portfolio,
        'total_withdrawals': sum(p.withdrawal_needed for p in projections),
        'total_guaranteed_income': sum(p.income for p in projections),
        'depletion_age': depletion_age,
        'is_sustainable': depletion_age is None,
        'refills_from_growth': actions.count(ACTION_REFILL_FROM_GROWTH),
        'refills_from_income': actions.count(ACTION_REFILL_FROM_INCOME),
        'years_cash_below_target': years_cash_below_target,
    }


def bucket_coverage(balances: BucketBalances,
                    profile: HouseholdProfile,
                    policy: BucketPolicy) -> Dict[str, Dict[str, float]]:
    """
    Years of today's spending held in the cash and income buckets.

    Returns:
        {'cash': {...}, 'income': {...}} with balance, years, target_years,
        target_amount, pct_of_target and meets_target
    """
    yearly_spend = profile.monthly_spending * 12
    coverage = {}
    for bucket, balance, target_years in (
            (CASH, balances.cash, policy.cash_target_years),
            (INCOME, balances.income, policy.income_target_years)):
        years = balance / yearly_spend if yearly_spend > 0 else 0.0
        coverage[bucket] = {
            'balance': balance,
            'years': years,
            'target_years': target_years,
            'target_amount': yearly_spend * target_years,
            'pct_of_target': min(max(years / target_years, 0.0), 1.0) if target_years > 0 else 0.0,
            'meets_target': years >= target_years,
        }
    return coverage


PROJECTION_COLUMNS = [
    'year', 'age', 'spending_need', 'income', 'withdrawal_needed',
    'start_balance_cash', 'start_balance_income', 'start_balance_growth',
    'end_balance_cash', 'end_balance_income', 'end_balance_growth',
    'total_portfolio', 'withdrawal_source', 'action',
]


def projections_to_dataframe(projections: List[YearlyProjection]) -> pd.DataFrame:
    """Tabular view of the projection records, one row per year"""
    return pd.DataFrame([asdict(p) for p in projections], columns=PROJECTION_COLUMNS)
