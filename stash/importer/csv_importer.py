"""
CSV Import Adapter

Turns exported balance rows into new snapshots.

Expected format (the first line is a header and is always dropped):

    date,institution,amount,category
    2024-01-01,Bank,100.50,Savings
    2024-01-01,Broker,2000,Stocks & Shares

Rules:
- A line must split into exactly four comma-separated fields
- date is YYYY-MM-DD
- amount is a finite decimal
- category matches one of the AccountCategory labels exactly
- Anything else is skipped silently (but counted)

DESIGN DECISION: Rows sharing a date are merged into ONE snapshot.
An export holds one row per account, and a snapshot is the set of
balances observed on a date, so this reassembles the original snapshots.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import BaseModel, Field, ValidationError

from stash.models.snapshot import AccountBalance, AccountCategory, Snapshot


logger = structlog.get_logger(__name__)

CSV_HEADER = "date,institution,amount,category"
CSV_DATE_FORMAT = "%Y-%m-%d"


class CSVImportError(Exception):
    """The import source could not be read at all."""
    pass


class ImportResult(BaseModel):
    """Outcome of parsing one CSV document."""

    snapshots: list[Snapshot] = Field(
        default_factory=list,
        description="New snapshots, one per distinct date, date ascending"
    )
    imported_rows: int = Field(
        default=0,
        ge=0,
        description="Rows turned into account balances"
    )
    skipped_rows: int = Field(
        default=0,
        ge=0,
        description="Data rows that were ignored"
    )

    @property
    def snapshot_count(self) -> int:
        return len(self.snapshots)

    def summary(self) -> str:
        """User-facing one-liner."""
        message = f"Successfully imported {self.snapshot_count} snapshots ({self.imported_rows} rows)."
        if self.skipped_rows:
            message += f" Skipped {self.skipped_rows} invalid rows."
        return message


def _safe_date(value: str) -> Optional[date]:
    """Parse a YYYY-MM-DD date, None if it doesn't parse."""
    try:
        return datetime.strptime(value, CSV_DATE_FORMAT).date()
    except ValueError:
        return None


def _safe_decimal(value: str) -> Optional[Decimal]:
    """Parse a finite decimal, None if it doesn't parse."""
    try:
        amount = Decimal(value)
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def _safe_category(value: str) -> Optional[AccountCategory]:
    """Exact label match only."""
    try:
        return AccountCategory(value)
    except ValueError:
        return None


def parse_csv(text: str) -> ImportResult:
    """
    Parse CSV text into snapshots grouped by date.

    Never raises for bad rows; they are skipped and counted.
    Blank lines are ignored without being counted as skipped.
    """
    lines = text.splitlines()[1:]  # header is always dropped

    accounts_by_date: dict[date, list[AccountBalance]] = {}
    imported = 0
    skipped = 0

    for line in lines:
        if not line.strip():
            continue

        columns = line.split(",")
        if len(columns) != 4:
            skipped += 1
            continue

        raw_date, institution, raw_amount, raw_category = columns
        row_date = _safe_date(raw_date)
        amount = _safe_decimal(raw_amount)
        category = _safe_category(raw_category)
        if row_date is None or amount is None or category is None:
            skipped += 1
            continue

        try:
            account = AccountBalance(
                institution=institution,
                amount=amount,
                category=category,
            )
        except ValidationError:
            skipped += 1
            continue

        accounts_by_date.setdefault(row_date, []).append(account)
        imported += 1

    snapshots = [
        Snapshot(date=row_date, accounts=accounts)
        for row_date, accounts in sorted(accounts_by_date.items())
    ]

    logger.info(
        "csv_parsed",
        snapshots=len(snapshots),
        imported_rows=imported,
        skipped_rows=skipped,
    )
    return ImportResult(snapshots=snapshots, imported_rows=imported, skipped_rows=skipped)


def read_csv_file(path: Union[str, Path]) -> str:
    """
    Read a CSV export as text.

    A UTF-8 byte order mark (as written by spreadsheet apps) is dropped.

    Raises:
        CSVImportError: If the file can't be read or isn't UTF-8
    """
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise CSVImportError(f"Could not read {path}: {e}") from e


def decode_csv_bytes(data: bytes) -> str:
    """Decode uploaded CSV bytes (UTF-8, BOM tolerated)."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CSVImportError(f"File is not UTF-8 text: {e}") from e
