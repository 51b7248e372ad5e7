"""Mapper functions to convert between domain entities and stored JSON records.

Stored records use the camelCase keys of the persisted collections and of
the export file format. Optional fields that are unset are omitted.
"""

from decimal import Decimal
from typing import Any, Optional

from pennywise.domain.entities import (
    Account,
    AccountType,
    DebtEntry,
    DebtStatus,
    DebtType,
    Entry,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    TransactionSource,
    TransferEntry,
)
from pennywise.utils.amount_parser import amount_to_json, to_decimal
from pennywise.utils.date_parser import format_timestamp, parse_timestamp


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _descriptions(record: dict) -> tuple[str, ...]:
    values = record.get("descriptions") or []
    if not isinstance(values, list):
        raise TypeError("descriptions must be a list")
    return tuple(str(value) for value in values)


def _optional_timestamp(value: Any):
    if value is None or value == "":
        return None
    return parse_timestamp(value)


def _put(record: dict, key: str, value: Any) -> None:
    if value is not None:
        record[key] = value


def account_to_record(account: Account) -> dict[str, Any]:
    """Convert an Account entity to its stored form."""
    return {
        "id": account.id,
        "name": account.name,
        "type": account.type.value,
        "isDefault": account.is_default,
        "isActive": account.is_active,
        "createdAt": format_timestamp(account.created_at),
        "updatedAt": format_timestamp(account.updated_at),
    }


def account_from_record(record: dict[str, Any]) -> Account:
    """Convert a stored account record to an Account entity."""
    created_at = parse_timestamp(record["createdAt"])
    return Account(
        id=str(record["id"]),
        name=str(record["name"]),
        type=AccountType(record["type"]),
        created_at=created_at,
        updated_at=parse_timestamp(record.get("updatedAt") or record["createdAt"]),
        is_default=bool(record.get("isDefault", False)),
        # Records written before the soft-delete flag existed are active
        is_active=record.get("isActive") is not False,
    )


def income_to_record(entry: IncomeEntry) -> dict[str, Any]:
    record = {
        "id": entry.id,
        "amount": amount_to_json(entry.amount),
        "source": entry.source.value,
        "subcategory": entry.subcategory,
        "descriptions": list(entry.descriptions),
        "date": format_timestamp(entry.date),
    }
    _put(record, "accountId", entry.account_id)
    _put(record, "description", entry.description)
    return record


def income_from_record(record: dict[str, Any]) -> IncomeEntry:
    return IncomeEntry(
        id=str(record["id"]),
        amount=to_decimal(record["amount"]),
        source=TransactionSource(record["source"]),
        date=parse_timestamp(record["date"]),
        account_id=_optional_str(record.get("accountId")),
        subcategory=record.get("subcategory") or "",
        descriptions=_descriptions(record),
        description=_optional_str(record.get("description")),
    )


def expense_to_record(entry: ExpenseEntry) -> dict[str, Any]:
    record = {
        "id": entry.id,
        "amount": amount_to_json(entry.amount),
        "category": entry.category,
        "subcategory": entry.subcategory,
        "source": entry.source.value,
        "descriptions": list(entry.descriptions),
        "date": format_timestamp(entry.date),
    }
    _put(record, "accountId", entry.account_id)
    _put(record, "description", entry.description)
    return record


def expense_from_record(record: dict[str, Any]) -> ExpenseEntry:
    return ExpenseEntry(
        id=str(record["id"]),
        amount=to_decimal(record["amount"]),
        category=str(record["category"]),
        source=TransactionSource(record["source"]),
        date=parse_timestamp(record["date"]),
        account_id=_optional_str(record.get("accountId")),
        subcategory=record.get("subcategory") or "",
        descriptions=_descriptions(record),
        description=_optional_str(record.get("description")),
    )


def transfer_to_record(entry: TransferEntry) -> dict[str, Any]:
    record = {
        "id": entry.id,
        "amount": amount_to_json(entry.amount),
        "fromSource": entry.from_source.value,
        "toSource": entry.to_source.value,
        "descriptions": list(entry.descriptions),
        "date": format_timestamp(entry.date),
    }
    _put(record, "fromAccountId", entry.from_account_id)
    _put(record, "toAccountId", entry.to_account_id)
    _put(record, "description", entry.description)
    return record


def transfer_from_record(record: dict[str, Any]) -> TransferEntry:
    return TransferEntry(
        id=str(record["id"]),
        amount=to_decimal(record["amount"]),
        from_source=TransactionSource(record["fromSource"]),
        to_source=TransactionSource(record["toSource"]),
        date=parse_timestamp(record["date"]),
        from_account_id=_optional_str(record.get("fromAccountId")),
        to_account_id=_optional_str(record.get("toAccountId")),
        descriptions=_descriptions(record),
        description=_optional_str(record.get("description")),
    )


def debt_to_record(entry: DebtEntry) -> dict[str, Any]:
    record = {
        "id": entry.id,
        "amount": amount_to_json(entry.amount),
        "type": entry.type.value,
        "personName": entry.person_name,
        "source": entry.source.value,
        "date": format_timestamp(entry.date),
        "status": entry.status.value,
        "settledAmount": amount_to_json(entry.settled_amount),
        "descriptions": list(entry.descriptions),
    }
    _put(record, "accountId", entry.account_id)
    if entry.due_date is not None:
        record["dueDate"] = format_timestamp(entry.due_date)
    if entry.settled_date is not None:
        record["settledDate"] = format_timestamp(entry.settled_date)
    return record


def debt_from_record(record: dict[str, Any]) -> DebtEntry:
    settled_amount = record.get("settledAmount")
    return DebtEntry(
        id=str(record["id"]),
        amount=to_decimal(record["amount"]),
        type=DebtType(record["type"]),
        person_name=str(record["personName"]),
        source=TransactionSource(record["source"]),
        date=parse_timestamp(record["date"]),
        status=DebtStatus(record.get("status") or DebtStatus.PENDING),
        account_id=_optional_str(record.get("accountId")),
        due_date=_optional_timestamp(record.get("dueDate")),
        settled_date=_optional_timestamp(record.get("settledDate")),
        settled_amount=to_decimal(settled_amount) if settled_amount is not None else Decimal("0"),
        descriptions=_descriptions(record),
    )


_TO_RECORD = {
    EntryKind.INCOME: income_to_record,
    EntryKind.EXPENSE: expense_to_record,
    EntryKind.TRANSFER: transfer_to_record,
    EntryKind.DEBT: debt_to_record,
}

_FROM_RECORD = {
    EntryKind.INCOME: income_from_record,
    EntryKind.EXPENSE: expense_from_record,
    EntryKind.TRANSFER: transfer_from_record,
    EntryKind.DEBT: debt_from_record,
}


def entry_to_record(kind: EntryKind, entry: Entry) -> dict[str, Any]:
    """Convert any transaction entity to its stored form."""
    return _TO_RECORD[kind](entry)


def entry_from_record(kind: EntryKind, record: dict[str, Any]) -> Entry:
    """Convert a stored record of the given kind to its entity.

    Raises:
        KeyError, TypeError, ValueError: If the record is malformed
    """
    if not isinstance(record, dict):
        raise TypeError(f"Expected an object, got {type(record).__name__}")
    return _FROM_RECORD[kind](record)
