"""
Tests for the command line demo.
"""
from demo import SAMPLE_HOLDINGS, load_inputs, main
from holdings_io import export_holdings_csv
from io_utils import create_plan_download_json
from models import BucketPolicy, HouseholdProfile


class TestDemo:

    def test_sample_inputs(self):
        holdings, profile, policy = load_inputs(['demo.py'])
        assert holdings == SAMPLE_HOLDINGS
        assert policy == BucketPolicy()

    def test_inputs_from_files(self, tmp_path):
        csv_path = tmp_path / 'holdings.csv'
        csv_path.write_text(export_holdings_csv(SAMPLE_HOLDINGS[:2]))
        plan_path = tmp_path / 'plan.json'
        plan_path.write_text(create_plan_download_json(HouseholdProfile(current_age=62), BucketPolicy()))

        holdings, profile, policy = load_inputs(['demo.py', str(csv_path), str(plan_path)])

        assert [h.ticker for h in holdings] == ['SPAXX', 'BND']
        assert profile.current_age == 62

    def test_main_prints_summary(self, capsys):
        main(['demo.py'])
        out = capsys.readouterr().out
        assert "Bucket Projection Demo" in out
        assert "Year-by-Year" in out
