# src/utilization_core/ingest.py
"""
Record ingestion for the utilization overview.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

This module turns the data-fetch layer's payload (JSON-style mappings with
camelCase or snake_case keys) into UtilizationRecord tuples, and is the one
place where RowKey uniqueness is enforced. Numeric semantics (negative
amounts, overage inconsistent with used - authorized) are NOT validated;
those values flow into statistics as delivered.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from dateutil import parser as date_parser

from .config import DuplicatePolicy
from .model import ROW_KEY_SEPARATOR, UtilizationRecord, make_row_key, to_decimal

logger = logging.getLogger(__name__)


# Canonical field -> accepted payload keys (first match wins)
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'account_number': ('accountNumber', 'account_number', 'acct'),
    'authorization_number': ('authorizationNumber', 'authorization_number', 'auth'),
    'authorized_amount': ('authorizedAmount', 'authorized_amount'),
    'used_amount': ('usedAmount', 'used_amount'),
    'overage_amount': ('overageAmount', 'overage_amount'),
    'currency_code': ('currencyCode', 'currency_code', 'currency'),
    'product_name': ('productName', 'product_name'),
    'product_family': ('productFamily', 'product_family'),
}

REQUIRED_FIELDS = (
    'account_number',
    'authorization_number',
    'authorized_amount',
    'used_amount',
    'overage_amount',
)

AMOUNT_FIELDS = ('authorized_amount', 'used_amount', 'overage_amount')


class RecordValidationError(ValueError):
    """A payload entry cannot be turned into a UtilizationRecord."""


class DuplicateRowKeyError(RecordValidationError):
    """The same account/authorization pair appears more than once."""

    def __init__(self, duplicate_keys: Sequence[str]):
        self.duplicate_keys = tuple(duplicate_keys)
        shown = ", ".join(k.replace(ROW_KEY_SEPARATOR, "/") for k in self.duplicate_keys[:5])
        more = "" if len(self.duplicate_keys) <= 5 else f" (+{len(self.duplicate_keys) - 5} more)"
        super().__init__(f"Duplicate account/authorization pairs: {shown}{more}")


@dataclass(frozen=True)
class Snapshot:
    """A loaded record set and the time it was taken (if provided)."""
    records: Tuple[UtilizationRecord, ...]
    as_of: Optional[datetime] = None


def _lookup(mapping: Mapping[str, Any], field_name: str) -> Any:
    for alias in FIELD_ALIASES[field_name]:
        if alias in mapping:
            return mapping[alias]
    return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def record_from_mapping(mapping: Mapping[str, Any], *, index: Optional[int] = None) -> UtilizationRecord:
    """
    Build a UtilizationRecord from one payload entry.

    Args:
        mapping: Payload entry (camelCase or snake_case keys)
        index: Optional position in the payload, used in error messages

    Returns:
        UtilizationRecord with Decimal amounts

    Raises:
        RecordValidationError: Missing required field, non-numeric amount,
            or an identifier containing the row key separator
    """
    where = f"record {index}" if index is not None else "record"

    if not isinstance(mapping, Mapping):
        raise RecordValidationError(f"{where}: expected an object, got {type(mapping).__name__}")

    values = {name: _lookup(mapping, name) for name in FIELD_ALIASES}
    for name in ('account_number', 'authorization_number'):
        if values[name] is not None:
            values[name] = str(values[name]).strip()

    missing = [name for name in REQUIRED_FIELDS if values[name] is None or values[name] == ""]
    if missing:
        raise RecordValidationError(f"{where}: missing required field(s): {', '.join(missing)}")

    for name in AMOUNT_FIELDS:
        try:
            values[name] = to_decimal(values[name])
        except ValueError as e:
            raise RecordValidationError(f"{where}: {name}: {e}") from e

    account_number = values['account_number']
    authorization_number = values['authorization_number']
    try:
        make_row_key(account_number, authorization_number)
    except ValueError as e:
        raise RecordValidationError(f"{where}: {e}") from e

    return UtilizationRecord(
        account_number=account_number,
        authorization_number=authorization_number,
        authorized_amount=values['authorized_amount'],
        used_amount=values['used_amount'],
        overage_amount=values['overage_amount'],
        currency_code=_optional_text(values['currency_code']),
        product_name=_optional_text(values['product_name']),
        product_family=_optional_text(values['product_family']),
    )


def find_duplicate_keys(records: Iterable[UtilizationRecord]) -> List[str]:
    """RowKeys that occur more than once, in order of first repetition."""
    seen = set()
    duplicates: List[str] = []
    for record in records:
        key = record.row_key
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates


def load_records(
    items: Optional[Iterable[Mapping[str, Any]]],
    *,
    policy: DuplicatePolicy = DuplicatePolicy.REJECT,
) -> Tuple[UtilizationRecord, ...]:
    """
    Build records from payload entries, enforcing RowKey uniqueness.

    Args:
        items: Payload entries in delivery order (None yields no records)
        policy: REJECT raises on duplicates; KEEP_FIRST drops later
            occurrences with a warning

    Returns:
        Tuple of records in delivery order

    Raises:
        RecordValidationError: On a malformed entry
        DuplicateRowKeyError: On duplicates under REJECT
    """
    if items is None:
        return ()

    records = [record_from_mapping(item, index=i) for i, item in enumerate(items)]

    duplicates = find_duplicate_keys(records)
    if not duplicates:
        return tuple(records)

    if policy == DuplicatePolicy.REJECT:
        raise DuplicateRowKeyError(duplicates)

    kept: List[UtilizationRecord] = []
    seen = set()
    for i, record in enumerate(records):
        key = record.row_key
        if key in seen:
            logger.warning(
                "Dropping duplicate record %d for account %s authorization %s",
                i,
                record.account_number,
                record.authorization_number,
            )
            continue
        seen.add(key)
        kept.append(record)
    return tuple(kept)


def parse_as_of(value: Any) -> Optional[datetime]:
    """
    Parse a snapshot timestamp (ISO 8601).

    Raises:
        RecordValidationError: If the value is not a valid timestamp
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return date_parser.isoparse(str(value))
    except (ValueError, OverflowError) as e:
        raise RecordValidationError(f"Invalid asOf timestamp {value!r}: {e}") from e


def _decode_json(raw: bytes, label: str) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise RecordValidationError(f"{label}: not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise RecordValidationError(f"{label}: not valid JSON: {e}") from e


def load_snapshot(
    source: Union[str, Path, bytes, Mapping[str, Any], List[Any]],
    *,
    policy: DuplicatePolicy = DuplicatePolicy.REJECT,
) -> Snapshot:
    """
    Load a snapshot from a JSON file or an already-decoded payload.

    Accepted shapes:
        [ {record}, ... ]
        {"asOf": "2024-05-31T18:00:00Z", "records": [ {record}, ... ]}

    Args:
        source: Path to a JSON file, raw UTF-8 JSON bytes (an upload),
            or the decoded payload
        policy: Duplicate RowKey policy

    Returns:
        Snapshot with records and optional as_of timestamp

    Raises:
        RecordValidationError: Undecodable JSON or a malformed payload
        OSError: If the file cannot be read
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        payload = _decode_json(path.read_bytes(), path.name)
        logger.info("Loaded snapshot payload from %s", path)
    elif isinstance(source, bytes):
        payload = _decode_json(source, "snapshot")
    else:
        payload = source

    if isinstance(payload, list):
        return Snapshot(records=load_records(payload, policy=policy))

    if isinstance(payload, Mapping):
        items = payload.get('records')
        if items is not None and not isinstance(items, list):
            raise RecordValidationError("'records' must be a list")
        as_of = parse_as_of(payload.get('asOf', payload.get('as_of')))
        return Snapshot(records=load_records(items, policy=policy), as_of=as_of)

    raise RecordValidationError(
        f"Snapshot must be a list or an object, got {type(payload).__name__}"
    )
