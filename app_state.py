"""
Session State Utilities
Keeps the holdings list, household profile and bucket policy in Streamlit
session state so every page reads the same immutable snapshots.
"""

from dataclasses import replace
from typing import Any, Dict, List, MutableMapping, Optional

from models import BUCKET_TYPES, BucketPolicy, Holding, HouseholdProfile
from config_utils import get_default_profile, get_default_policy

HOLDINGS_KEY = 'holdings'
PROFILE_KEY = 'profile'
POLICY_KEY = 'bucket_policy'


def _session(state: Optional[MutableMapping[str, Any]]) -> MutableMapping[str, Any]:
    if state is not None:
        return state
    import streamlit as st
    return st.session_state


def initialize_state(state: Optional[MutableMapping[str, Any]] = None) -> None:
    """Seed session state with defaults on first load"""
    session = _session(state)
    if HOLDINGS_KEY not in session:
        session[HOLDINGS_KEY] = []
    if PROFILE_KEY not in session:
        session[PROFILE_KEY] = get_default_profile()
    if POLICY_KEY not in session:
        session[POLICY_KEY] = get_default_policy()


def get_holdings(state: Optional[MutableMapping[str, Any]] = None) -> List[Holding]:
    return list(_session(state).get(HOLDINGS_KEY, []))


def get_profile(state: Optional[MutableMapping[str, Any]] = None) -> HouseholdProfile:
    return _session(state).get(PROFILE_KEY) or get_default_profile()


def get_policy(state: Optional[MutableMapping[str, Any]] = None) -> BucketPolicy:
    return _session(state).get(POLICY_KEY) or get_default_policy()


def update_profile(changes: Dict[str, Any],
                   state: Optional[MutableMapping[str, Any]] = None) -> HouseholdProfile:
    """Store a new profile snapshot with the given fields changed"""
    session = _session(state)
    profile = replace(get_profile(session), **changes)
    session[PROFILE_KEY] = profile
    return profile


def update_policy(changes: Dict[str, Any],
                  state: Optional[MutableMapping[str, Any]] = None) -> BucketPolicy:
    session = _session(state)
    policy = replace(get_policy(session), **changes)
    session[POLICY_KEY] = policy
    return policy


def add_holdings(new_holdings: List[Holding],
                 state: Optional[MutableMapping[str, Any]] = None) -> List[Holding]:
    session = _session(state)
    holdings = get_holdings(session) + list(new_holdings)
    session[HOLDINGS_KEY] = holdings
    return holdings


def remove_holding(index: int,
                   state: Optional[MutableMapping[str, Any]] = None) -> List[Holding]:
    session = _session(state)
    holdings = get_holdings(session)
    if 0 <= index < len(holdings):
        del holdings[index]
    session[HOLDINGS_KEY] = holdings
    return holdings


def set_bucket(index: int, bucket: str,
               state: Optional[MutableMapping[str, Any]] = None) -> List[Holding]:
    """Re-tag one holding; the list is replaced, never mutated in place"""
    if bucket not in BUCKET_TYPES:
        raise ValueError(f"Unknown bucket: {bucket}")
    session = _session(state)
    holdings = get_holdings(session)
    if 0 <= index < len(holdings):
        holdings[index] = replace(holdings[index], bucket=bucket)
    session[HOLDINGS_KEY] = holdings
    return holdings
