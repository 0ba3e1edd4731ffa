"""
Tests for configuration defaults, UI settings files and logging setup.
"""
import logging

from config_utils import (
    APP_PAGES, get_default_profile, get_default_policy,
    load_ui_config, save_ui_config, setup_logging,
)
from models import validate_profile, validate_policy


class TestDefaults:

    def test_default_profile_is_valid(self):
        profile = get_default_profile()

        assert validate_profile(profile) == []
        assert profile.has_spouse_benefit
        assert profile.monthly_spending == 6_000

    def test_default_policy_is_valid(self):
        policy = get_default_policy()

        assert validate_policy(policy) == []
        assert (policy.cash_target_years, policy.income_target_years) == (2, 5)

    def test_app_pages(self):
        assert [page['id'] for page in APP_PAGES] == ['holdings', 'buckets', 'projection']
        assert all(page['path'].startswith('pages/') for page in APP_PAGES)


class TestUIConfig:
    """Test UI settings persistence"""

    def test_missing_file(self, tmp_path):
        assert load_ui_config(str(tmp_path / 'missing.json')) == {}

    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / 'ui_config.json')
        save_ui_config({'log_level': 'DEBUG', 'currency_precision': 1}, path)

        assert load_ui_config(path) == {'log_level': 'DEBUG', 'currency_precision': 1}

    def test_invalid_file_logs_warning(self, tmp_path, caplog):
        path = tmp_path / 'ui_config.json'
        path.write_text('{broken')

        with caplog.at_level(logging.WARNING, logger='config_utils'):
            assert load_ui_config(str(path)) == {}
        assert "Could not load" in caplog.text

    def test_non_object_ignored(self, tmp_path):
        path = tmp_path / 'ui_config.json'
        path.write_text('[1, 2]')
        assert load_ui_config(str(path)) == {}


class TestLogging:

    def test_setup_logging_sets_level(self):
        root = logging.getLogger()
        previous = root.level
        try:
            setup_logging('DEBUG')
            assert root.level == logging.DEBUG
            setup_logging(logging.WARNING)
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)
