"""
Data model for the three-bucket retirement planner.
Plain dataclass records consumed by the projection engine and the UI.
"""
import math
from dataclasses import dataclass
from typing import List, Optional


# Bucket tags
CASH = "cash"
INCOME = "income"
GROWTH = "growth"
UNASSIGNED = "unassigned"
BUCKET_TYPES = (CASH, INCOME, GROWTH, UNASSIGNED)

BUCKET_LABELS = {
    CASH: "Bucket 1 (Cash)",
    INCOME: "Bucket 2 (Income)",
    GROWTH: "Bucket 3 (Growth)",
    UNASSIGNED: "Unassigned",
}

ASSET_TYPES = ("stock", "etf", "mutual_fund", "bond", "cash", "other")
ACCOUNT_TYPES = ("taxable", "traditional_ira", "roth_ira", "401k", "other")

DEFAULT_ACCOUNT = "Default Account"

# Upper bounds shared by validation and the profile and policy widgets
MAX_AGE = 120
MAX_INFLATION_RATE = 20.0  # percent
MAX_CASH_TARGET_YEARS = 5.0
MAX_INCOME_TARGET_YEARS = 15.0


@dataclass(frozen=True)
class HouseholdProfile:
    """Household ages, spending and guaranteed income (monthly amounts)"""
    current_age: int = 55
    retirement_age: int = 65
    life_expectancy: int = 90
    monthly_spending: float = 6_000
    inflation_rate: float = 3.0  # percent

    # Primary earner Social Security
    social_security_age: int = 67
    social_security_amount: float = 2_500  # monthly

    # Spouse (optional)
    spouse_age: Optional[int] = None
    spouse_social_security_age: Optional[int] = None
    spouse_social_security_amount: Optional[float] = None  # monthly

    # Pension / annuity, flat
    other_income: float = 0.0  # monthly

    @property
    def has_spouse_benefit(self) -> bool:
        return bool(self.spouse_age and self.spouse_social_security_age
                    and self.spouse_social_security_amount)

    def validate(self) -> None:
        problems = validate_profile(self)
        if problems:
            raise ValueError("; ".join(problems))


@dataclass(frozen=True)
class BucketPolicy:
    """Expected returns (percent) and reserve targets (years of spending)"""
    cash_return: float = 4.0
    income_return: float = 5.0
    growth_return: float = 8.0
    cash_target_years: float = 2
    income_target_years: float = 5

    def validate(self) -> None:
        problems = validate_policy(self)
        if problems:
            raise ValueError("; ".join(problems))


@dataclass(frozen=True)
class Holding:
    """A single position as supplied by the holdings table or an import"""
    ticker: str
    quantity: float
    current_price: float
    bucket: str = UNASSIGNED
    name: str = ""
    asset_type: str = "stock"
    account: str = DEFAULT_ACCOUNT
    cost_basis_per_share: Optional[float] = None
    notes: str = ""
    is_manual_price: bool = False

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def cost_basis_total(self) -> Optional[float]:
        if self.cost_basis_per_share is None:
            return None
        return self.quantity * self.cost_basis_per_share

    @property
    def unrealized_gain(self) -> Optional[float]:
        basis = self.cost_basis_total
        if basis is None:
            return None
        return self.market_value - basis


@dataclass(frozen=True)
class BucketBalances:
    """Cash, income and growth bucket balances at a point in time"""
    cash: float = 0.0
    income: float = 0.0
    growth: float = 0.0

    @property
    def total(self) -> float:
        return self.cash + self.income + self.growth


@dataclass(frozen=True)
class YearlyProjection:
    """One simulated year of the bucket projection"""
    year: int
    age: int
    spending_need: float
    income: float
    withdrawal_needed: float

    start_balance_cash: float
    start_balance_income: float
    start_balance_growth: float

    end_balance_cash: float
    end_balance_income: float
    end_balance_growth: float

    total_portfolio: float
    withdrawal_source: str
    action: str


def _is_negative(value) -> bool:
    return value is not None and value < 0


def validate_profile(profile: HouseholdProfile) -> List[str]:
    """
    Check a household profile before it is handed to the engine.

    Returns:
        List of problems, empty when the profile is usable
    """
    problems = []

    age_fields = {
        'current_age': profile.current_age,
        'retirement_age': profile.retirement_age,
        'life_expectancy': profile.life_expectancy,
        'social_security_age': profile.social_security_age,
    }
    money_fields = {
        'monthly_spending': profile.monthly_spending,
        'social_security_amount': profile.social_security_amount,
        'other_income': profile.other_income,
        'inflation_rate': profile.inflation_rate,
    }
    upper_bounds = dict.fromkeys(age_fields, MAX_AGE)
    upper_bounds.update(spouse_age=MAX_AGE, spouse_social_security_age=MAX_AGE,
                        inflation_rate=MAX_INFLATION_RATE)

    for name, value in {**age_fields, **money_fields}.items():
        if value is None or not math.isfinite(value):
            problems.append(f"{name} must be a finite number")
        elif value < 0:
            problems.append(f"{name} must be non-negative")
        elif value > upper_bounds.get(name, math.inf):
            problems.append(f"{name} must be at most {upper_bounds[name]:g}")

    spouse_fields = {
        'spouse_age': profile.spouse_age,
        'spouse_social_security_age': profile.spouse_social_security_age,
        'spouse_social_security_amount': profile.spouse_social_security_amount,
    }
    for name, value in spouse_fields.items():
        if _is_negative(value):
            problems.append(f"{name} must be non-negative")
        elif value is not None and value > upper_bounds.get(name, math.inf):
            problems.append(f"{name} must be at most {upper_bounds[name]:g}")

    if not problems:
        if profile.life_expectancy < profile.current_age:
            problems.append(
                f"Life expectancy ({profile.life_expectancy}) must be at least "
                f"the current age ({profile.current_age})")
        if profile.retirement_age > profile.life_expectancy:
            problems.append(
                f"Retirement age ({profile.retirement_age}) cannot exceed "
                f"life expectancy ({profile.life_expectancy})")

    return problems


def validate_policy(policy: BucketPolicy) -> List[str]:
    """Check bucket policy returns and reserve targets"""
    problems = []

    for name in ('cash_return', 'income_return', 'growth_return'):
        value = getattr(policy, name)
        if value is None or not math.isfinite(value):
            problems.append(f"{name} must be a finite percentage")

    target_limits = {'cash_target_years': MAX_CASH_TARGET_YEARS,
                     'income_target_years': MAX_INCOME_TARGET_YEARS}
    for name, limit in target_limits.items():
        value = getattr(policy, name)
        if value is None or not math.isfinite(value) or value <= 0:
            problems.append(f"{name} must be positive")
        elif value > limit:
            problems.append(f"{name} must be at most {limit:g} years")

    return problems
