"""
Configuration Utilities for the Bucket Planner
Default profile/policy values, UI settings file handling and logging setup.
"""

import json
import logging
import os
from typing import Dict, Any

from models import HouseholdProfile, BucketPolicy

logger = logging.getLogger(__name__)

UI_CONFIG_PATH = 'ui_config.json'
LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def setup_logging(level=logging.INFO) -> None:
    """Configure root logging once; level may be an int or a name such as DEBUG"""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)


def load_ui_config(path: str = UI_CONFIG_PATH) -> Dict[str, Any]:
    """Load UI settings (currency display, default upload folder) from JSON"""
    if not os.path.exists(path):
        logger.debug("UI config %s does not exist, using defaults", path)
        return {}
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", path, e)
        return {}
    if not isinstance(config, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return {}
    logger.debug("Loaded UI config with %d keys", len(config))
    return config


def save_ui_config(config: Dict[str, Any], path: str = UI_CONFIG_PATH) -> None:
    """Save UI settings to JSON"""
    try:
        with open(path, 'w') as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        logger.warning("Could not save %s: %s", path, e)
        return
    logger.debug("Saved UI config with %d keys to %s", len(config), path)


def get_default_profile() -> HouseholdProfile:
    """Starting household profile for a new plan"""
    return HouseholdProfile(
        current_age=55,
        retirement_age=65,
        life_expectancy=90,
        monthly_spending=6_000,
        inflation_rate=3.0,
        social_security_age=67,
        social_security_amount=2_500,
        spouse_age=53,
        spouse_social_security_age=67,
        spouse_social_security_amount=1_800,
        other_income=0,
    )


def get_default_policy() -> BucketPolicy:
    """Starting bucket policy: cash 2 years, income 5 years"""
    return BucketPolicy(
        cash_return=4.0,
        income_return=5.0,
        growth_return=8.0,
        cash_target_years=2,
        income_target_years=5,
    )


# Page configuration for the Streamlit navigation
APP_PAGES = [
    {"id": "holdings", "title": "Holdings", "icon": "📋", "path": "pages/holdings_view.py"},
    {"id": "buckets", "title": "Buckets", "icon": "🪣", "path": "pages/buckets_view.py"},
    {"id": "projection", "title": "Projection", "icon": "📈", "path": "pages/projection_view.py"},
]

