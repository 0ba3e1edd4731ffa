"""
Tests for chart visualization functions.
Verifies chart generation and structure without testing visual output.
"""
import unittest

from charts import (
    create_bucket_balance_chart, create_income_vs_spending_chart,
    create_withdrawal_chart, create_bucket_allocation_chart,
)
from models import BucketBalances, BucketPolicy, Holding, HouseholdProfile, CASH, GROWTH
from projection import run_projection, SOURCE_CASH, SOURCE_ALL_BUCKETS


class TestCharts(unittest.TestCase):

    def setUp(self):
        """Set up a sustainable and a failing projection"""
        self.policy = BucketPolicy()
        self.profile = HouseholdProfile(current_age=60, life_expectancy=90, monthly_spending=5000,
                                        social_security_age=67, social_security_amount=2500)
        self.holdings = [
            Holding(ticker='SPAXX', quantity=150_000, current_price=1.0, bucket=CASH),
            Holding(ticker='VTI', quantity=4_000, current_price=250.0, bucket=GROWTH),
        ]
        self.projections = run_projection(self.profile, self.policy, self.holdings, 2030)

        failing_profile = HouseholdProfile(current_age=65, retirement_age=65, life_expectancy=66,
                                           monthly_spending=4000, inflation_rate=0,
                                           social_security_age=65, social_security_amount=2000)
        zero_returns = BucketPolicy(cash_return=0, income_return=0, growth_return=0)
        self.failing = run_projection(
            failing_profile, zero_returns,
            [Holding(ticker='CASH', quantity=10_000, current_price=1.0, bucket=CASH)], 2030)

    def test_bucket_balance_chart(self):
        """Test stacked balance chart has one trace per bucket"""
        fig = create_bucket_balance_chart(self.projections)

        self.assertEqual(len(fig.data), 3)
        names = [trace.name for trace in fig.data]
        self.assertEqual(names, ["Bucket 3 (Growth)", "Bucket 2 (Income)", "Bucket 1 (Cash)"])
        for trace in fig.data:
            self.assertEqual(trace.stackgroup, 'one')
            self.assertEqual(len(trace.x), 31)

        # Values are plotted in thousands
        self.assertAlmostEqual(fig.data[2].y[0], self.projections[0].end_balance_cash / 1000)
        self.assertEqual(fig.layout.title.text, "Portfolio Balance Projection")

    def test_bucket_balance_chart_marks_depletion(self):
        """Test a failing plan gets a depletion marker"""
        fig = create_bucket_balance_chart(self.failing)
        self.assertEqual(len(fig.layout.shapes), 1)
        self.assertEqual(fig.layout.shapes[0].x0, 65)

        fig_ok = create_bucket_balance_chart(self.projections)
        self.assertEqual(len(fig_ok.layout.shapes), 0)

    def test_income_vs_spending_chart(self):
        """Test spending bars and income line"""
        fig = create_income_vs_spending_chart(self.projections)

        self.assertEqual(len(fig.data), 2)
        self.assertEqual(fig.data[0].name, 'Spending Need')
        self.assertEqual(fig.data[1].name, 'Guaranteed Income')
        self.assertEqual(fig.data[0].type, 'bar')
        self.assertEqual(fig.data[1].type, 'scatter')

    def test_withdrawal_chart_only_sources_present(self):
        """Test only funding sources that occur become traces"""
        fig = create_withdrawal_chart(self.failing)

        self.assertEqual([trace.name for trace in fig.data], [SOURCE_ALL_BUCKETS])
        self.assertEqual(fig.layout.barmode, 'stack')

        fig = create_withdrawal_chart(self.projections)
        self.assertIn(SOURCE_CASH, [trace.name for trace in fig.data])

    def test_bucket_allocation_chart(self):
        """Test donut chart labels and default title"""
        balances = BucketBalances(cash=100_000, income=400_000, growth=1_000_000)
        fig = create_bucket_allocation_chart(balances)

        pie = fig.data[0]
        self.assertEqual(list(pie.labels), ["Bucket 1 (Cash)", "Bucket 2 (Income)", "Bucket 3 (Growth)"])
        self.assertEqual(pie.hole, 0.5)
        self.assertEqual(fig.layout.title.text, "Bucket Allocation ($1.50M)")

    def test_bucket_allocation_chart_with_unassigned(self):
        """Test unassigned holdings show as their own slice"""
        balances = BucketBalances(cash=100_000, income=0, growth=0)
        fig = create_bucket_allocation_chart(balances, unassigned_value=25_000, title="Allocation")

        pie = fig.data[0]
        self.assertEqual(pie.labels[-1], "Unassigned")
        self.assertEqual(pie.values[-1], 25_000)
        self.assertEqual(fig.layout.title.text, "Allocation")

    def test_empty_projection(self):
        """Test charts build from an empty projection"""
        fig = create_bucket_balance_chart([])
        self.assertEqual(len(fig.data), 3)
        self.assertEqual(len(create_withdrawal_chart([]).data), 0)


if __name__ == '__main__':
    unittest.main()
