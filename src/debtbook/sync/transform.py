"""Conversion between local records and remote rows.

Local records are dicts keyed by the local store's column names
(``accountId``, ``createdOn``); remote rows are dicts keyed by the remote
store's underscore names (``account_id``, ``created_on``). Keys are renamed
recursively in both directions. Values of the ``type`` and ``account_type``
keys are additionally translated between the local and remote enumeration
tokens.
"""

import re
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from debtbook.database.models import LOCAL_REFERENCES, TABLE_MODELS

ACCOUNT_TYPES_TO_REMOTE = {
    "cash_in_cash_out": "cash_in_out",
    "debit_credit": "debit_credit",
    "receive_send_out": "receive_send",
    "borrow_lend": "borrow_lend",
}

TRANSACTION_TYPES_TO_REMOTE = {
    "cashIn": "cash_in",
    "cashOut": "cash_out",
    "debit": "debit",
    "credit": "credit",
    "receive": "receive",
    "sendOut": "send_out",
    "borrow": "borrow",
    "lend": "lend",
}

TYPE_VALUES_TO_REMOTE = {**ACCOUNT_TYPES_TO_REMOTE, **TRANSACTION_TYPES_TO_REMOTE}
TYPE_VALUES_TO_LOCAL = {remote: local for local, remote in TYPE_VALUES_TO_REMOTE.items()}

# Keys whose values are enumeration tokens rather than free values
TYPE_KEYS = frozenset({"type", "account_type"})

# Local columns that never leave the device
LOCAL_ONLY_FIELDS = frozenset(
    {"id", "supabaseId", "syncStatus", "needsUpload", "lastSyncAt", "passwordHash", "pinCode"}
)

# Remote foreign-key columns per table: column -> referenced table
FOREIGN_KEYS: dict[str, dict[str, str]] = {
    table: {"user_id": "users", **dict(LOCAL_REFERENCES.get(table, []))}
    for table in TABLE_MODELS
    if table != "users"
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_case(name: str) -> str:
    """Convert ``accountId`` to ``account_id``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_camel_case(name: str) -> str:
    """Convert ``account_id`` to ``accountId``."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _remap_type(key: str, value: Any, table: dict[str, str]) -> Any:
    if key in TYPE_KEYS and isinstance(value, str):
        return table.get(value, value)
    return value


def to_remote_keys(value: Any) -> Any:
    """Recursively rename dict keys to the remote naming convention."""
    if isinstance(value, dict):
        renamed = {}
        for key, item in value.items():
            remote_key = to_snake_case(key)
            renamed[remote_key] = _remap_type(remote_key, to_remote_keys(item), TYPE_VALUES_TO_REMOTE)
        return renamed
    if isinstance(value, list):
        return [to_remote_keys(item) for item in value]
    return value


def to_local_keys(value: Any) -> Any:
    """Recursively rename dict keys to the local naming convention."""
    if isinstance(value, dict):
        renamed = {}
        for key, item in value.items():
            item = _remap_type(to_snake_case(key), to_local_keys(item), TYPE_VALUES_TO_LOCAL)
            renamed[to_camel_case(key)] = item
        return renamed
    if isinstance(value, list):
        return [to_local_keys(item) for item in value]
    return value


def serialize_value(value: Any) -> Any:
    """Convert a local value to its JSON representation."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def to_remote_row(local_record: dict[str, Any]) -> dict[str, Any]:
    """Build the remote row for a local record.

    Local-only bookkeeping and secret fields are dropped; the primary key is
    left for the caller to supply.
    """
    payload = {
        key: serialize_value(value)
        for key, value in local_record.items()
        if key not in LOCAL_ONLY_FIELDS
    }
    return to_remote_keys(payload)


def from_remote_row(row: dict[str, Any]) -> dict[str, Any]:
    """Build a local record from a remote row, dropping local-only fields."""
    local = to_local_keys(row)
    return {key: value for key, value in local.items() if key not in LOCAL_ONLY_FIELDS}


def is_remote_id(value: Any) -> bool:
    """Whether a value has the remote store's identifier format (a UUID)."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True
