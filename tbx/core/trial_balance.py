# tbx/core/trial_balance.py

"""
Trial balance CSV ingestion and result emission.

Reading validates what the classification core trusts: required columns,
non-empty code and name, unique codes. Writing emits one row per result,
with the evidence list kept as a single JSON column.
"""

import csv
import io
from pathlib import Path
from typing import IO, Iterable

from pydantic import BaseModel

from tbx.models import Account, ClassificationResult, NewAccountResult

REQUIRED_COLUMNS = ["account_code", "account_name"]
OPTIONAL_COLUMNS = [
    "parent_code",
    "level",
    "opening_balance",
    "debit",
    "credit",
    "closing_balance",
    "currency",
]

_FORMAT_HELP = (
    "Required format:\n"
    "  account_code,account_name[,parent_code,level,opening_balance,debit,credit,closing_balance,currency]\n"
    "\n"
    "Example:\n"
    "  account_code,account_name,parent_code,opening_balance\n"
    "  1000,Cash,,5000.00\n"
    "  1100,Bank Account,1000,15000.00"
)


class TrialBalanceError(ValueError):
    """A trial balance file failed validation."""


# ============================================
# Reading
# ============================================

def read_trial_balance(path: str | Path) -> list[Account]:
    """Read and validate a trial balance CSV file."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise TrialBalanceError(f"File is not valid UTF-8: {path}") from e

    return parse_trial_balance(text, source=str(path))


def parse_trial_balance(text: str, source: str = "<upload>") -> list[Account]:
    """
    Parse trial balance CSV text.

    Header names are matched case-insensitively, values are trimmed and
    blank lines skipped.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))

    header = next(reader, None)
    if not header:
        raise TrialBalanceError(f"No header found in file: {source}")

    columns = [h.strip().lower() for h in header]
    for required in REQUIRED_COLUMNS:
        if required not in columns:
            raise TrialBalanceError(
                f"Missing required column '{required}' in file: {source}\n\n{_FORMAT_HELP}"
            )

    known = REQUIRED_COLUMNS + OPTIONAL_COLUMNS
    index = {name: columns.index(name) for name in known if name in columns}

    accounts: list[Account] = []
    seen_codes: set[str] = set()

    # Row numbers are 1-based and count the header
    for row_number, row in enumerate(reader, start=2):
        if not any(cell.strip() for cell in row):
            continue

        values = {
            name: row[i].strip() if i < len(row) else ""
            for name, i in index.items()
        }
        code = values["account_code"]
        name = values["account_name"]

        if not code:
            raise TrialBalanceError(f"Empty account_code found at row {row_number} in file: {source}")
        if not name:
            raise TrialBalanceError(f"Empty account_name found at row {row_number} in file: {source}")
        if code in seen_codes:
            raise TrialBalanceError(
                f"Duplicate account_code '{code}' found at row {row_number} in file: {source}"
            )
        seen_codes.add(code)

        accounts.append(Account(
            account_code=code,
            account_name=name,
            **{k: values[k] or None for k in OPTIONAL_COLUMNS if k in values},
        ))

    return accounts


# ============================================
# Writing
# ============================================

def write_new_accounts(target: str | Path | IO[str], results: Iterable[NewAccountResult]) -> None:
    """Write comparison-only results as CSV."""
    _write_models(target, list(NewAccountResult.model_fields), results)


def write_classification_results(
    target: str | Path | IO[str],
    results: Iterable[ClassificationResult],
) -> None:
    """Write classification results as CSV; evidence stays a JSON column."""
    _write_models(target, list(ClassificationResult.model_fields), results)


def classification_results_to_csv(results: Iterable[ClassificationResult]) -> str:
    """Render classification results as CSV text."""
    buffer = io.StringIO()
    write_classification_results(buffer, results)
    return buffer.getvalue()


def _write_models(
    target: str | Path | IO[str],
    fieldnames: list[str],
    rows: Iterable[BaseModel],
) -> None:
    if isinstance(target, (str, Path)):
        with open(target, "w", newline="", encoding="utf-8") as f:
            _write_rows(f, fieldnames, rows)
    else:
        _write_rows(target, fieldnames, rows)


def _write_rows(stream: IO[str], fieldnames: list[str], rows: Iterable[BaseModel]) -> None:
    writer = csv.DictWriter(stream, fieldnames=fieldnames)
    writer.writeheader()
    for row in rows:
        writer.writerow(row.model_dump())
