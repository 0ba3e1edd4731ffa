"""
Tests for holdings import/export: CSV, Excel and statement text.
"""
from io import BytesIO

import pandas as pd
import pytest

from models import Holding, CASH, INCOME, GROWTH, UNASSIGNED, DEFAULT_ACCOUNT
from holdings_io import (
    CSV_HEADERS, infer_bucket, infer_asset_type, parse_number,
    export_holdings_csv, parse_holdings_csv, parse_holdings_spreadsheet,
    load_holdings_file, parse_statement_text, holdings_to_dataframe,
)


STATEMENT_TEXT = (
    "GCO Genesco Inc 2431 $27.22 $0.63 +2.37% +$1,531.53 $66,171.82 "
    "BTC Bitcoin 4984 $40.66 $0.00 0.00% $0.00 $202,624.52 "
    "BND Vanguard Total Bond 100 $72.40 -$0.10 -0.14% -$10.00 $7,240.00 "
    "Cash 171091.7 $1.00 $0.00 0.00% $0.00 $171,091.69 "
    "INVESCO VI 3565.13 $61.17 $0.00 0.00% $0.00 $218,079.00"
)


class TestInference:
    """Test bucket and asset type inference"""

    @pytest.mark.parametrize("text,ticker,expected", [
        ("Cash", None, CASH),
        ("1", None, CASH),
        ("2", None, INCOME),
        ("Fixed Income", None, INCOME),
        ("Equity", None, GROWTH),
        ("3", None, GROWTH),
        ("unassigned", "VTI", UNASSIGNED),
        ("", "SPAXX", CASH),
        ("", "BND", INCOME),
        ("", "SCHD", INCOME),
        ("", "AAPL", GROWTH),
        ("", None, UNASSIGNED),
    ])
    def test_infer_bucket(self, text, ticker, expected):
        assert infer_bucket(text, ticker) == expected

    def test_infer_asset_type(self):
        assert infer_asset_type('ETF', 'VTI') == 'etf'
        assert infer_asset_type('Bond ETF', 'BND') == 'etf'
        assert infer_asset_type('Mutual Fund', 'ABC') == 'mutual_fund'
        assert infer_asset_type('Money Market', 'ABC') == 'cash'
        assert infer_asset_type('', 'VFIAX') == 'mutual_fund'
        assert infer_asset_type('', 'CASH') == 'cash'
        assert infer_asset_type('', 'AAPL') == 'stock'

    def test_parse_number(self):
        assert parse_number("$1,234.50") == 1234.5
        assert parse_number(" 42 ") == 42.0
        assert parse_number(7) == 7.0
        assert parse_number("") == 0.0
        assert parse_number(None) == 0.0
        assert parse_number(float('nan')) == 0.0
        assert parse_number("n/a") == 0.0


class TestCsvImportExport:
    """Test holdings CSV export and import"""

    def setup_method(self):
        self.holdings = [
            Holding(ticker='VTI', name='Vanguard Total Stock Market, ETF', asset_type='etf',
                    quantity=10.0, current_price=242.5, cost_basis_per_share=180.0,
                    bucket=GROWTH, account='Brokerage', notes='core'),
            Holding(ticker='AAPL', name='Apple', asset_type='stock', quantity=5.0,
                    current_price=190.0, bucket=UNASSIGNED, account='Roth IRA'),
        ]

    def test_export_header(self):
        csv_text = export_holdings_csv(self.holdings)
        assert csv_text.splitlines()[0] == ','.join(CSV_HEADERS)
        assert '"Vanguard Total Stock Market, ETF"' in csv_text

    def test_export_then_import(self):
        result = parse_holdings_csv(export_holdings_csv(self.holdings))

        assert result.success
        assert result.holdings == self.holdings
        assert result.new_accounts == ['Brokerage', 'Roth IRA']

    def test_known_accounts_not_reported_as_new(self):
        result = parse_holdings_csv(export_holdings_csv(self.holdings), known_accounts=['brokerage'])
        assert result.new_accounts == ['Roth IRA']

    def test_empty_csv(self):
        result = parse_holdings_csv("")
        assert not result.success
        assert result.errors == ['CSV file is empty or invalid']

        result = parse_holdings_csv(','.join(CSV_HEADERS))
        assert result.errors == ['CSV file is empty or invalid']

    def test_short_rows_reported(self):
        csv_text = "\n".join([
            ','.join(CSV_HEADERS),
            "SPAXX,Money Market,cash,5000,1,,cash,,",
            "BND,Bond",
            ",Blank ticker,etf,1,1,,,,",
        ])
        result = parse_holdings_csv(csv_text)

        assert result.errors == ["Row 3: Insufficient columns"]
        assert [h.ticker for h in result.holdings] == ['SPAXX']
        assert result.holdings[0].account == DEFAULT_ACCOUNT
        assert result.holdings[0].bucket == CASH
        assert result.holdings[0].cost_basis_per_share is None

    def test_minimal_columns_infer_bucket(self):
        csv_text = "Ticker,Name,Type,Quantity,Current Price\nbnd,,,100,$72.40\n"
        result = parse_holdings_csv(csv_text)

        holding = result.holdings[0]
        assert holding.ticker == 'BND'
        assert holding.name == 'BND'
        assert holding.bucket == INCOME
        assert holding.market_value == pytest.approx(7240)

    def test_load_holdings_file_dispatch(self):
        data = ('\ufeff' + export_holdings_csv(self.holdings)).encode('utf-8')
        result = load_holdings_file('Holdings.CSV', data)
        assert len(result.holdings) == 2

        result = load_holdings_file('statement.pdf', b'%PDF')
        assert not result.success
        assert 'Unsupported file type' in result.errors[0]

    def test_non_utf8_csv_still_imports(self):
        csv_text = ','.join(CSV_HEADERS) + "\nVTI,Soci\xe9t\xe9 G\xe9n\xe9rale,etf,10,250,,growth,Compte,\n"
        result = load_holdings_file('holdings.csv', csv_text.encode('latin-1'))

        assert result.success
        assert [h.ticker for h in result.holdings] == ['VTI']
        assert result.holdings[0].name.startswith('Soci')
        assert result.holdings[0].market_value == 2500

    def test_legacy_xls_rejected(self):
        ole2_header = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1' + b'\x00' * 504
        result = load_holdings_file('holdings.xls', ole2_header)

        assert not result.success
        assert 'Unsupported file type' in result.errors[0]


class TestSpreadsheetImport:
    """Test Excel import with brokerage column names"""

    @staticmethod
    def workbook(df):
        buffer = BytesIO()
        df.to_excel(buffer, index=False)
        buffer.seek(0)
        return buffer

    def test_columns_found_by_keyword(self):
        df = pd.DataFrame({
            'Symbol': ['SPAXX', 'BND', None, 'VTI'],
            'Description': ['Money Market', 'Total Bond', 'Pending', 'Total Stock'],
            'Shares': ['1,000', 100, 5, 20],
            'Price': [1.0, '$72.40', 3.0, 250.0],
            'Account': ['IRA', 'IRA', 'IRA', 'Taxable'],
            'Category': ['Cash', '', '', 'Growth'],
        })
        result = parse_holdings_spreadsheet(self.workbook(df))

        assert result.success
        assert [h.ticker for h in result.holdings] == ['SPAXX', 'BND', 'VTI']
        assert [h.bucket for h in result.holdings] == [CASH, INCOME, GROWTH]
        assert result.holdings[0].quantity == 1000
        assert result.holdings[1].current_price == pytest.approx(72.40)
        assert result.holdings[1].name == 'Total Bond'
        assert result.new_accounts == ['IRA', 'Taxable']

    def test_missing_quantity_column(self):
        df = pd.DataFrame({'Symbol': ['VTI'], 'Price': [250.0]})
        result = parse_holdings_spreadsheet(self.workbook(df))

        assert not result.success
        assert 'Quantity' in result.errors[0]

    def test_unreadable_file(self):
        result = parse_holdings_spreadsheet(BytesIO(b'not a spreadsheet'))
        assert not result.success
        assert result.errors[0].startswith('Failed to parse Excel file')


class TestStatementText:
    """Test scraping positions from statement text"""

    def test_statement_rows(self):
        holdings = parse_statement_text(STATEMENT_TEXT)
        by_ticker = {h.ticker: h for h in holdings}

        assert set(by_ticker) == {'GCO', 'BTC', 'BND', 'INVESC', 'CASH'}
        assert by_ticker['GCO'].quantity == 2431
        assert by_ticker['GCO'].current_price == 27.22
        assert by_ticker['GCO'].bucket == GROWTH
        assert by_ticker['BND'].bucket == INCOME
        assert by_ticker['CASH'].bucket == CASH
        assert by_ticker['CASH'].quantity == 171091.7
        assert by_ticker['INVESC'].name == 'INVESCO VI'
        assert all(h.is_manual_price for h in holdings)

    def test_duplicate_rows_collapsed(self):
        row = "BND Vanguard Total Bond 100 $72.40 -$0.10 -0.14% -$10.00 $7,240.00"
        holdings = parse_statement_text(row + "\n" + row)
        assert len(holdings) == 1

    def test_noise_words_skipped(self):
        text = "ETF Something 100 $10.00 +$0.10 +1.00% +$10.00 $1,000.00"
        assert parse_statement_text(text) == []

    def test_no_positions(self):
        assert parse_statement_text("Account summary as of today") == []


class TestHoldingsTable:

    def test_holdings_to_dataframe(self):
        holdings = [Holding(ticker='VTI', quantity=2, current_price=250.0, bucket=GROWTH)]
        df = holdings_to_dataframe(holdings)

        assert df['market_value'].tolist() == [500.0]
        assert holdings_to_dataframe([]).empty
