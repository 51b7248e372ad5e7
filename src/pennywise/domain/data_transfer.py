"""Bulk export, import and clear of the transaction collections.

Imports are fail-closed: the payload structure and every record of every
collection are validated before anything is written, and a single invalid
record rejects the whole file. Accepted files replace all four collections
in one commit.
"""

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from pennywise.database.mappers import entry_from_record, entry_to_record
from pennywise.database.store import LedgerStore
from pennywise.domain.entities import DebtStatus, DebtType, EntryKind, TransactionSource
from pennywise.domain.errors import (
    ImportValidationError,
    invalid_collection,
    invalid_structure,
)
from pennywise.utils.date_parser import canonical_timestamp, format_timestamp, is_valid_timestamp, utc_now

logger = logging.getLogger(__name__)

INCOME_ENTRIES = "incomeEntries"
EXPENSE_ENTRIES = "expenseEntries"
TRANSFER_ENTRIES = "transferEntries"
DEBT_ENTRIES = "debtEntries"
EXPORTED_AT = "exportedAt"

REQUIRED_COLLECTIONS = (INCOME_ENTRIES, EXPENSE_ENTRIES, TRANSFER_ENTRIES)

COLLECTION_KINDS = {
    INCOME_ENTRIES: EntryKind.INCOME,
    EXPENSE_ENTRIES: EntryKind.EXPENSE,
    TRANSFER_ENTRIES: EntryKind.TRANSFER,
    DEBT_ENTRIES: EntryKind.DEBT,
}

_SOURCES = {source.value for source in TransactionSource}
_DEBT_TYPES = {debt_type.value for debt_type in DebtType}
_DEBT_STATUSES = {status.value for status in DebtStatus}
_DATE_FIELDS = ("date", "dueDate", "settledDate")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_positive(value: Any) -> bool:
    return _is_number(value) and value > 0


def _optional_str(record: dict, key: str) -> bool:
    return record.get(key) is None or isinstance(record[key], str)


def _optional_list(record: dict, key: str) -> bool:
    return record.get(key) is None or isinstance(record[key], list)


def _optional_date(record: dict, key: str) -> bool:
    return record.get(key) is None or is_valid_timestamp(record[key])


def _common_fields(record: Any) -> bool:
    return (
        isinstance(record, dict)
        and isinstance(record.get("id"), str)
        and is_valid_timestamp(record.get("date"))
        and _optional_list(record, "descriptions")
        and _optional_str(record, "description")
    )


def is_valid_income(record: Any) -> bool:
    """Check an income record from an import file."""
    return (
        _common_fields(record)
        and _is_number(record.get("amount"))
        and record.get("source") in _SOURCES
        and _optional_str(record, "subcategory")
        and _optional_str(record, "accountId")
    )


def is_valid_expense(record: Any) -> bool:
    """Check an expense record: as income, plus a non-empty category."""
    return (
        is_valid_income(record)
        and isinstance(record.get("category"), str)
        and bool(record["category"].strip())
    )


def is_valid_transfer(record: Any) -> bool:
    """Check a transfer record; both sides must be different sources."""
    return (
        _common_fields(record)
        and _is_positive(record.get("amount"))
        and record.get("fromSource") in _SOURCES
        and record.get("toSource") in _SOURCES
        and record["fromSource"] != record["toSource"]
        and _optional_str(record, "fromAccountId")
        and _optional_str(record, "toAccountId")
    )


def is_valid_debt(record: Any) -> bool:
    """Check a debt record."""
    if not _common_fields(record):
        return False
    settled_amount = record.get("settledAmount")
    return (
        _is_positive(record.get("amount"))
        and record.get("type") in _DEBT_TYPES
        and isinstance(record.get("personName"), str)
        and bool(record["personName"].strip())
        and record.get("source") in _SOURCES
        and record.get("status") in _DEBT_STATUSES
        and _optional_date(record, "dueDate")
        and _optional_date(record, "settledDate")
        and (settled_amount is None or (_is_number(settled_amount) and settled_amount >= 0))
        and _optional_str(record, "accountId")
    )


VALIDATORS = {
    INCOME_ENTRIES: is_valid_income,
    EXPENSE_ENTRIES: is_valid_expense,
    TRANSFER_ENTRIES: is_valid_transfer,
    DEBT_ENTRIES: is_valid_debt,
}


def normalize_record(collection: str, record: dict) -> dict:
    """Canonicalize dates and fill in defaults on a validated record."""
    normalized = dict(record)
    for key in _DATE_FIELDS:
        if normalized.get(key) is not None:
            normalized[key] = canonical_timestamp(normalized[key])
    if collection in (INCOME_ENTRIES, EXPENSE_ENTRIES) and normalized.get("subcategory") is None:
        normalized["subcategory"] = ""
    if normalized.get("descriptions") is None:
        normalized["descriptions"] = []
    return normalized


@dataclass(frozen=True)
class ValidatedPayload:
    """Normalized records of an accepted import file, each sorted date-desc."""

    income: list[dict]
    expenses: list[dict]
    transfers: list[dict]
    debts: list[dict]

    def entries(self) -> dict[EntryKind, list]:
        """Convert the records to entities, keyed by kind."""
        return {
            EntryKind.INCOME: [entry_from_record(EntryKind.INCOME, r) for r in self.income],
            EntryKind.EXPENSE: [entry_from_record(EntryKind.EXPENSE, r) for r in self.expenses],
            EntryKind.TRANSFER: [entry_from_record(EntryKind.TRANSFER, r) for r in self.transfers],
            EntryKind.DEBT: [entry_from_record(EntryKind.DEBT, r) for r in self.debts],
        }


def validate_payload(payload: Any) -> ValidatedPayload:
    """Validate and normalize an untrusted import payload.

    ``debtEntries`` may be missing (files exported before debts existed);
    it must be an array when present.

    Raises:
        ImportValidationError: If the structure is wrong or any record is invalid
    """
    if not isinstance(payload, dict):
        raise ImportValidationError(invalid_structure())
    for collection in REQUIRED_COLLECTIONS:
        if not isinstance(payload.get(collection), list):
            raise ImportValidationError(invalid_structure())
    debts = payload.get(DEBT_ENTRIES)
    if debts is not None and not isinstance(debts, list):
        raise ImportValidationError(
            f"Invalid file structure. '{DEBT_ENTRIES}' must be an array when present.",
            collection=DEBT_ENTRIES,
        )

    normalized = {}
    for collection, validator in VALIDATORS.items():
        records = payload.get(collection) or []
        for index, record in enumerate(records):
            if not validator(record):
                raise ImportValidationError(
                    invalid_collection(collection, index), collection=collection, index=index
                )
        normalized[collection] = sorted(
            (normalize_record(collection, record) for record in records),
            key=lambda record: canonical_timestamp(record["date"]),
            reverse=True,
        )

    return ValidatedPayload(
        income=normalized[INCOME_ENTRIES],
        expenses=normalized[EXPENSE_ENTRIES],
        transfers=normalized[TRANSFER_ENTRIES],
        debts=normalized[DEBT_ENTRIES],
    )


def build_export(store: LedgerStore, now: datetime) -> dict[str, Any]:
    """Build the export document for the store's current collections."""
    document = {}
    for collection, kind in COLLECTION_KINDS.items():
        document[collection] = [entry_to_record(kind, entry) for entry in store.entries(kind)]
    document[EXPORTED_AT] = format_timestamp(now)
    return document


class DataTransferService:
    """Service for exporting, importing and clearing ledger data."""

    def __init__(self, store: LedgerStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def export_data(self) -> dict[str, Any]:
        return build_export(self.store, self.clock())

    def export_to_file(self, path: str | Path) -> dict[str, Any]:
        """Write the export document as indented JSON.

        Returns:
            The exported document
        """
        document = self.export_data()
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        logger.info("Exported ledger data to %s", path)
        return document

    def load_payload(self, path: str | Path) -> Any:
        """Read an import file.

        Raises:
            ImportValidationError: If the file cannot be read or is not JSON
        """
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise ImportValidationError(f"Could not read file '{path}': {e}")
        except json.JSONDecodeError as e:
            raise ImportValidationError(f"File '{path}' is not valid JSON: {e}")

    def import_data(self, payload: Any, confirm: Callable[[], bool]) -> bool:
        """Replace all four collections with the payload's records.

        Validation runs to completion before ``confirm`` is asked; nothing is
        written unless every record is valid and the user agrees.

        Returns:
            False if the user declined, True once the collections are replaced

        Raises:
            ImportValidationError: If the payload is rejected
        """
        try:
            validated = validate_payload(payload)
            entries = validated.entries()
        except ImportValidationError as e:
            logger.warning("Import rejected: %s", e)
            raise
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Import rejected: %s", e)
            raise ImportValidationError(f"Invalid data: {e}")

        if not confirm():
            logger.info("Import cancelled")
            return False

        self.store.replace_collections(
            entries[EntryKind.INCOME],
            entries[EntryKind.EXPENSE],
            entries[EntryKind.TRANSFER],
            entries[EntryKind.DEBT],
        )
        logger.info(
            "Imported %s income, %s expense, %s transfer and %s debt entries",
            len(validated.income),
            len(validated.expenses),
            len(validated.transfers),
            len(validated.debts),
        )
        return True

    def clear_all(self, confirm: Callable[[], bool]) -> bool:
        """Empty all four transaction collections. Accounts are kept.

        Returns:
            False if the user declined
        """
        if not confirm():
            return False
        self.store.replace_collections([], [], [], [])
        logger.info("Cleared all transaction data")
        return True
