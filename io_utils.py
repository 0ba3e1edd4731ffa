"""
IO utilities for saving/loading plan settings and exporting projection results.
Handles JSON serialization of the household profile and bucket policy and CSV
exports of the year-by-year projection.
"""
import json
from dataclasses import asdict, fields
from datetime import datetime
from typing import Dict, Any, List, Tuple

from models import HouseholdProfile, BucketPolicy, YearlyProjection, validate_profile, validate_policy
from projection import projections_to_dataframe

# Keys written by the web client (camelCase) mapped to field names
CAMEL_CASE_KEYS = {
    'currentAge': 'current_age',
    'retirementAge': 'retirement_age',
    'lifeExpectancy': 'life_expectancy',
    'monthlySpending': 'monthly_spending',
    'inflationRate': 'inflation_rate',
    'socialSecurityAge': 'social_security_age',
    'socialSecurityAmount': 'social_security_amount',
    'spouseAge': 'spouse_age',
    'spouseSocialSecurityAge': 'spouse_social_security_age',
    'spouseSocialSecurityAmount': 'spouse_social_security_amount',
    'otherIncome': 'other_income',
    'cashReturn': 'cash_return',
    'incomeReturn': 'income_return',
    'growthReturn': 'growth_return',
    'cashTargetYears': 'cash_target_years',
    'incomeTargetYears': 'income_target_years',
}


def _normalize_keys(data: Dict[str, Any], record_type) -> Dict[str, Any]:
    """Map camelCase keys to field names and drop keys the record does not have"""
    allowed = {f.name for f in fields(record_type)}
    normalized = {}
    for key, value in data.items():
        name = CAMEL_CASE_KEYS.get(key, key)
        if name in allowed:
            normalized[name] = value
    return normalized


def profile_to_dict(profile: HouseholdProfile) -> Dict[str, Any]:
    return asdict(profile)


def dict_to_profile(profile_dict: Dict[str, Any]) -> HouseholdProfile:
    """
    Convert dictionary to HouseholdProfile.

    Args:
        profile_dict: Field values, snake_case or camelCase

    Returns:
        HouseholdProfile (missing fields take their defaults)
    """
    return HouseholdProfile(**_normalize_keys(profile_dict, HouseholdProfile))


def policy_to_dict(policy: BucketPolicy) -> Dict[str, Any]:
    return asdict(policy)


def dict_to_policy(policy_dict: Dict[str, Any]) -> BucketPolicy:
    return BucketPolicy(**_normalize_keys(policy_dict, BucketPolicy))


def create_plan_download_json(profile: HouseholdProfile, policy: BucketPolicy) -> str:
    """
    Create JSON string for downloading the plan settings.

    Args:
        profile: Household profile
        policy: Bucket policy

    Returns:
        JSON string
    """
    plan = {
        'profile': profile_to_dict(profile),
        'bucket_policy': policy_to_dict(policy),
        'metadata': {
            'created_by': 'Bucket Planner',
            'created_date': datetime.now().isoformat(),
        },
    }
    return json.dumps(plan, indent=2)


def parse_plan_upload_json(json_string: str) -> Tuple[HouseholdProfile, BucketPolicy]:
    """
    Parse uploaded plan JSON.

    Accepts the download layout as well as a scenario exported by the
    web client ({"profile": ..., "bucketConfig": ...}).

    Returns:
        (profile, policy)
    """
    plan = json.loads(json_string)
    if not isinstance(plan, dict):
        raise ValueError("Plan JSON must be an object")

    profile_data = plan.get('profile', {})
    policy_data = plan.get('bucket_policy', plan.get('bucketConfig', {}))
    return dict_to_profile(profile_data), dict_to_policy(policy_data)


def validate_plan_json(json_string: str) -> Tuple[bool, str]:
    """
    Validate uploaded plan JSON.

    Args:
        json_string: JSON string to validate

    Returns:
        (is_valid, error_message)
    """
    try:
        plan = json.loads(json_string)
        if not isinstance(plan, dict):
            return False, "Plan JSON must be an object"

        if 'profile' not in plan:
            return False, "Missing required section: profile"
        if 'bucket_policy' not in plan and 'bucketConfig' not in plan:
            return False, "Missing required section: bucket_policy"

        profile, policy = parse_plan_upload_json(json_string)

        problems = validate_profile(profile) + validate_policy(policy)
        if problems:
            return False, problems[0]

        return True, ""

    except json.JSONDecodeError as e:
        return False, f"Invalid JSON: {str(e)}"
    except (TypeError, ValueError) as e:
        return False, f"Parameter validation error: {str(e)}"


def export_projection_csv(projections: List[YearlyProjection]) -> str:
    """
    Export the year-by-year projection to CSV string.

    Args:
        projections: Output of run_projection

    Returns:
        CSV string
    """
    df = projections_to_dataframe(projections)
    money_columns = [c for c in df.columns
                     if c not in ('year', 'age', 'withdrawal_source', 'action')]
    df[money_columns] = df[money_columns].round(2)
    return df.to_csv(index=False)


def format_currency(value: float, precision: int = 0) -> str:
    """
    Format currency values for display.

    Args:
        value: Numeric value to format
        precision: Number of decimal places

    Returns:
        Formatted string, e.g. "$1.2M", "-$14K"
    """
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if magnitude >= 1_000_000:
        return f"{sign}${magnitude/1_000_000:.{precision}f}M"
    if magnitude >= 1_000:
        return f"{sign}${magnitude/1_000:.{precision}f}K"
    return f"{sign}${magnitude:.{precision}f}"
