"""
Holdings import/export: CSV and spreadsheet files, brokerage statement text.
Every importer returns priced, bucket-tagged Holding records ready for the
projection engine.
"""
import csv
import io
import logging
import re
import zipfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from models import (
    CASH, INCOME, GROWTH, UNASSIGNED, DEFAULT_ACCOUNT, Holding,
)

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    'Ticker', 'Name', 'Type', 'Quantity', 'Current Price',
    'Cost Basis Per Share', 'Bucket', 'Account', 'Notes',
]

# Ticker heuristics for bucket assignment
CASH_TICKERS = [
    'SPAXX', 'FDRXX', 'VMFXX', 'SWVXX', 'SPRXX', 'FDLXX', 'FZFXX', 'FGTXX',
    'MFIS', 'MFRS', 'CASH', 'USD', 'MONEY', 'MMKT', 'DEPOSIT',
]
BOND_TICKERS = [
    'BND', 'AGG', 'TIP', 'VTIP', 'SCHZ', 'IUSB', 'VBTLX', 'BOND', 'GOVT',
    'LQD', 'HYG', 'JNK', 'MUB', 'TLT', 'IEF', 'SHY', 'VCIT', 'VCSH', 'BSV',
    'BIV', 'BLV', 'VAIPX', 'VBMFX', 'FBNDX', 'VGIT', 'IGIB', 'USHY', 'LBNOX',
    'JCBUX', 'VWOB', 'PIMCO',
]
DIVIDEND_TICKERS = [
    'SCHD', 'VIG', 'VYM', 'DVY', 'SDY', 'HDV', 'DGRO', 'NOBL', 'SPYD',
    'SPHD', 'VDIGX', 'VHDYX',
]

# Spreadsheet header keywords, checked in order
COLUMN_KEYWORDS = {
    'ticker': ['ticker', 'symbol', 'fund', 'security'],
    'name': ['name', 'description', 'security name'],
    'quantity': ['quantity', 'shares', 'units', 'qty', 'amount'],
    'price': ['price', 'current price', 'market price', 'value', 'market value'],
    'account': ['account', 'account name', 'acct'],
    'type': ['type', 'asset type', 'security type', 'asset class'],
    'bucket': ['bucket', 'category'],
}

# Words that match the ticker pattern in statement text but are not tickers
STATEMENT_NOISE_WORDS = {
    'NONE', 'FROM', 'ETF', 'SHARES', 'FUND', 'INDEX', 'TRUST', 'DAY',
    'HOLDINGS', 'AM', 'HTTPS', 'HTTP', 'TERMS', 'HELP', 'FAQ', 'VI', 'VIT',
    'PIMCO', 'BNY', 'MELLON',
}


@dataclass
class ImportResult:
    """Outcome of a holdings import"""
    holdings: List[Holding] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    new_accounts: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def infer_bucket(bucket_text: str, ticker: Optional[str] = None) -> str:
    """
    Work out a bucket tag from a bucket/category cell, falling back to the ticker.

    Args:
        bucket_text: Free text such as "Cash", "2" or "Equity"
        ticker: Ticker symbol used when the text is not recognized

    Returns:
        One of cash, income, growth or unassigned
    """
    text = (bucket_text or '').strip().lower()
    if text == UNASSIGNED:
        return UNASSIGNED
    if 'cash' in text or text == '1':
        return CASH
    if 'income' in text or 'bond' in text or text == '2':
        return INCOME
    if 'growth' in text or 'equity' in text or text == '3':
        return GROWTH

    if ticker:
        return infer_bucket_from_ticker(ticker)
    return UNASSIGNED


def infer_bucket_from_ticker(ticker: str) -> str:
    t = ticker.upper()
    if any(c in t for c in CASH_TICKERS):
        return CASH
    if any(b in t for b in BOND_TICKERS):
        return INCOME
    if any(d in t for d in DIVIDEND_TICKERS):
        return INCOME
    return GROWTH


def infer_asset_type(type_text: str, ticker: str) -> str:
    """Asset type from a type cell, falling back to ticker conventions"""
    text = (type_text or '').lower()
    if 'etf' in text:
        return 'etf'
    if 'mutual' in text or 'fund' in text:
        return 'mutual_fund'
    if 'bond' in text:
        return 'bond'
    if 'cash' in text or 'money market' in text:
        return 'cash'
    if 'stock' in text or 'equity' in text:
        return 'stock'

    t = ticker.upper()
    if 'CASH' in t or t in ('USD', 'SPAXX'):
        return 'cash'
    if t.endswith('X'):
        return 'mutual_fund'
    return 'stock'


def parse_number(value: Any) -> float:
    """Parse a numeric cell, tolerating $ and thousands separators"""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if pd.isna(value) else float(value)
    cleaned = re.sub(r'[,$\s]', '', str(value))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def export_holdings_csv(holdings: Sequence[Holding]) -> str:
    """
    Export holdings to CSV string in the layout parse_holdings_csv reads.

    Args:
        holdings: Holdings to export

    Returns:
        CSV string
    """
    rows = [{
        'Ticker': h.ticker,
        'Name': h.name,
        'Type': h.asset_type,
        'Quantity': h.quantity,
        'Current Price': h.current_price,
        'Cost Basis Per Share': '' if h.cost_basis_per_share is None else h.cost_basis_per_share,
        'Bucket': h.bucket,
        'Account': h.account,
        'Notes': h.notes,
    } for h in holdings]

    df = pd.DataFrame(rows, columns=CSV_HEADERS)
    return df.to_csv(index=False, lineterminator='\n')


class _AccountTracker:
    """Remembers account names seen during one import"""

    def __init__(self, known_accounts: Optional[Sequence[str]] = None):
        self.known = {name.lower() for name in (known_accounts or [])}
        self.new_accounts: List[str] = []

    def resolve(self, raw_name: str) -> str:
        name = (raw_name or '').strip() or DEFAULT_ACCOUNT
        key = name.lower()
        if key not in self.known:
            self.known.add(key)
            self.new_accounts.append(name)
        return name


def parse_holdings_csv(csv_text: str,
                       known_accounts: Optional[Sequence[str]] = None) -> ImportResult:
    """
    Parse holdings from CSV text with the export column order.

    Args:
        csv_text: CSV content including a header row
        known_accounts: Account names that already exist

    Returns:
        ImportResult with parsed holdings and per-row errors
    """
    rows = list(csv.reader(io.StringIO(csv_text.strip())))
    if len(rows) < 2:
        return ImportResult(errors=['CSV file is empty or invalid'])

    accounts = _AccountTracker(known_accounts)
    result = ImportResult()

    for row_num, fields in enumerate(rows[1:], start=2):
        if not fields or not any(f.strip() for f in fields):
            continue
        if len(fields) < 4:
            result.errors.append(f"Row {row_num}: Insufficient columns")
            continue

        fields = fields + [''] * (len(CSV_HEADERS) - len(fields))
        ticker, name, type_text, quantity, price, cost_basis, bucket, account, notes = fields[:9]
        ticker = ticker.strip().upper()
        if not ticker:
            logger.debug("Skipping row %d with no ticker", row_num)
            continue

        result.holdings.append(Holding(
            ticker=ticker,
            name=name or ticker,
            asset_type=infer_asset_type(type_text, ticker),
            quantity=parse_number(quantity),
            current_price=parse_number(price),
            cost_basis_per_share=parse_number(cost_basis) if cost_basis.strip() else None,
            bucket=infer_bucket(bucket, ticker),
            account=accounts.resolve(account),
            notes=notes,
        ))

    result.new_accounts = accounts.new_accounts
    return result


def find_column_index(headers: List[str], keywords: List[str]) -> int:
    """Index of the first header containing any keyword (keyword order wins)"""
    for keyword in keywords:
        for idx, header in enumerate(headers):
            if keyword in header:
                return idx
    return -1


def parse_holdings_spreadsheet(source: Any,
                               known_accounts: Optional[Sequence[str]] = None) -> ImportResult:
    """
    Parse holdings from the first sheet of an Excel workbook.

    Columns are located by header keywords, so brokerage exports with their
    own column names load without editing.

    Args:
        source: Path, bytes buffer or file-like object
        known_accounts: Account names that already exist

    Returns:
        ImportResult
    """
    try:
        sheet = pd.read_excel(source, sheet_name=0, header=None, dtype=object)
    except (ValueError, OSError, ImportError, zipfile.BadZipFile) as e:
        logger.warning("Failed to read spreadsheet: %s", e)
        return ImportResult(errors=[f"Failed to parse Excel file: {e}"])

    rows = sheet.where(pd.notna(sheet), None).values.tolist()
    if len(rows) < 2:
        return ImportResult(errors=['Excel file is empty or has no data rows'])

    headers = [str(h or '').strip().lower() for h in rows[0]]
    columns = {key: find_column_index(headers, words) for key, words in COLUMN_KEYWORDS.items()}

    errors = []
    if columns['ticker'] == -1:
        errors.append('Could not find Ticker/Symbol/Fund column. '
                      'Please ensure your file has a column with one of these headers.')
    if columns['quantity'] == -1:
        errors.append('Could not find Quantity/Shares/Units column. '
                      'Please ensure your file has a column with one of these headers.')
    if errors:
        return ImportResult(errors=errors)

    def cell(row: List[Any], key: str, default: Any = '') -> Any:
        idx = columns[key]
        if idx == -1 or idx >= len(row) or row[idx] is None:
            return default
        return row[idx]

    accounts = _AccountTracker(known_accounts)
    result = ImportResult()

    for row in rows[1:]:
        ticker = str(cell(row, 'ticker')).strip().upper()
        if not ticker:
            continue
        result.holdings.append(Holding(
            ticker=ticker,
            name=str(cell(row, 'name', ticker)),
            asset_type=infer_asset_type(str(cell(row, 'type')), ticker),
            quantity=parse_number(cell(row, 'quantity', 0)),
            current_price=parse_number(cell(row, 'price', 0)),
            bucket=infer_bucket(str(cell(row, 'bucket')), ticker),
            account=accounts.resolve(str(cell(row, 'account', DEFAULT_ACCOUNT))),
        ))

    result.new_accounts = accounts.new_accounts
    return result


def load_holdings_file(filename: str, data: bytes,
                       known_accounts: Optional[Sequence[str]] = None) -> ImportResult:
    """Dispatch an uploaded file to the right parser by extension"""
    lower = filename.lower()
    if lower.endswith('.xlsx'):
        return parse_holdings_spreadsheet(io.BytesIO(data), known_accounts)
    if lower.endswith('.csv'):
        # Non-UTF-8 bytes (cp1252, latin-1) decode to U+FFFD
        return parse_holdings_csv(data.decode('utf-8-sig', errors='replace'), known_accounts)
    return ImportResult(errors=['Unsupported file type. Please use CSV or Excel (.xlsx)'])


# Statement row tails: shares $price [+/-]$change [+/-]pct% [+/-]$gain $value
_MONEY = r'\$([\d,]+\.?\d*)'
_CHANGE_TAIL = r'\s+[+-]?\$[\d,.]+\s+[+-]?[\d,.]+%\s+[+-]?\$[\d,.]+\s+'
_TICKER = r'\b([A-Z]{2,6}(?:\.[A-Z]{1,2})?)'

STANDARD_ROW = re.compile(_TICKER + r'\s+[^$]+?\s+([\d,]+\.?\d*)\s+' + _MONEY + _CHANGE_TAIL + _MONEY)
ZERO_CHANGE_ROW = re.compile(
    _TICKER + r'\s+[^$]+?\s+([\d,]+\.?\d*)\s+' + _MONEY + r'\s+\$0\.00\s+0\.00%\s+\$0\.00\s+' + _MONEY)
PROPRIETARY_ROW = re.compile(
    r'(INVESCO VI|PIMCO VIT|BNY MELLON)\s+([\d,]+\.?\d*)\s+' + _MONEY + _CHANGE_TAIL + _MONEY,
    re.IGNORECASE)
CASH_ROW = re.compile(r'\bCash\s+([\d,]+\.?\d*)\s+\$1\.00' + _CHANGE_TAIL + _MONEY, re.IGNORECASE)
DEPOSIT_ROW = re.compile(
    r'Insured Bank Deposit\s+([\d,]+\.?\d*)\s+\$1\.00' + _CHANGE_TAIL + _MONEY, re.IGNORECASE)

PAGE_NOISE = [
    re.compile(r'\d+/\d+/\d+,\s+\d+:\d+\s+(AM|PM)\s+Empower\s+-\s+Portfolio\s+https?://\S+\s+\d+/\d+',
               re.IGNORECASE),
    re.compile(r'Privacy\s+Terms of Service.*?All Rights Reserved\.', re.IGNORECASE),
]


def _to_float(text: str) -> float:
    return float(text.replace(',', ''))


def parse_statement_text(text: str) -> List[Holding]:
    """
    Scrape positions out of text extracted from a brokerage statement PDF.

    Args:
        text: Plain text of the statement, pages joined by newlines

    Returns:
        Holdings with bucket tags inferred from their tickers
    """
    for pattern in PAGE_NOISE:
        text = pattern.sub(' ', text)

    holdings: List[Holding] = []
    seen = set()

    def add(ticker: str, name: str, shares: float, price: float, value: float, bucket: str) -> None:
        key = (ticker, f"{shares:.2f}")
        if key in seen or shares <= 0 or value <= 0:
            return
        seen.add(key)
        holdings.append(Holding(ticker=ticker, name=name, quantity=shares,
                                current_price=price, bucket=bucket,
                                asset_type=infer_asset_type('', ticker),
                                is_manual_price=True))

    for pattern in (STANDARD_ROW, ZERO_CHANGE_ROW):
        for match in pattern.finditer(text):
            ticker = match.group(1)
            if ticker in STATEMENT_NOISE_WORDS:
                continue
            add(ticker, ticker, _to_float(match.group(2)), _to_float(match.group(3)),
                _to_float(match.group(4)), infer_bucket_from_ticker(ticker))

    for match in PROPRIETARY_ROW.finditer(text):
        name = match.group(1).upper()
        ticker = name.replace(' ', '')[:6]
        # PIMCO VIT is a bond fund
        bucket = INCOME if 'PIMCO' in name else GROWTH
        add(ticker, name, _to_float(match.group(2)), _to_float(match.group(3)),
            _to_float(match.group(4)), bucket)

    for match in CASH_ROW.finditer(text):
        add('CASH', 'Cash', _to_float(match.group(1)), 1.0, _to_float(match.group(2)), CASH)

    for match in DEPOSIT_ROW.finditer(text):
        add('DEPOSIT', 'Insured Bank Deposit', _to_float(match.group(1)), 1.0,
            _to_float(match.group(2)), CASH)

    logger.debug("Parsed %d holdings from statement text", len(holdings))
    return holdings


def holdings_to_dataframe(holdings: Sequence[Holding]) -> pd.DataFrame:
    """Holdings table for display, with market value per row"""
    records: List[Dict[str, Any]] = [{
        'ticker': h.ticker,
        'name': h.name,
        'type': h.asset_type,
        'account': h.account,
        'bucket': h.bucket,
        'quantity': h.quantity,
        'current_price': h.current_price,
        'market_value': h.market_value,
    } for h in holdings]
    return pd.DataFrame(records, columns=['ticker', 'name', 'type', 'account', 'bucket',
                                          'quantity', 'current_price', 'market_value'])
