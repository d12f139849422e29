"""Builds typed extraction payloads from raw decoded JSON.

Whole-payload shape errors raise; individual rows or items that fail the
quantity/name invariants are dropped.
"""

import re
from typing import Any

from stockscan.normalization.exceptions import PayloadValidationError
from stockscan.normalization.names import (
    detect_item_type,
    normalize_item_name,
    normalize_partner_name,
)
from stockscan.processor.models import (
    ControlRows,
    DocumentType,
    ExtractedControlRow,
    ExtractedTransaction,
    ExtractionPayload,
    ItemType,
    LineItem,
)

_INTEGER_RE = re.compile(r"\d+")
_VALID_ITEM_TYPES = frozenset(t.value for t in ItemType)


def parse_quantity(raw: Any) -> int | None:
    """Return raw as a positive integer, or None."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            return None
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not _INTEGER_RE.fullmatch(text):
            return None
        value = int(text)
    else:
        return None
    return value if value > 0 else None


def _optional_text(raw: Any) -> str | None:
    if raw is None:
        return None
    text = normalize_partner_name(raw)
    return text or None


def build_line_item(raw: Any) -> LineItem | None:
    if not isinstance(raw, dict):
        return None
    name = normalize_item_name(raw.get("itemName", raw.get("name", "")))
    quantity = parse_quantity(raw.get("quantity"))
    if not name or quantity is None:
        return None
    item_type_raw = str(raw.get("itemType") or "").strip().upper()
    if item_type_raw in _VALID_ITEM_TYPES:
        item_type = ItemType(item_type_raw)
    else:
        item_type = detect_item_type(name)
    return LineItem(item_name=name, quantity=quantity, item_type=item_type)


def build_transaction(data: Any) -> ExtractedTransaction:
    """Build an ExtractedTransaction from {"destination": ..., "items": [...]}.

    Raises:
        PayloadValidationError: if data is not an object with an 'items' list.
    """
    if not isinstance(data, dict):
        raise PayloadValidationError("Transaction payload must be an object")
    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        raise PayloadValidationError("'items' must be a list")
    items = [item for item in (build_line_item(raw) for raw in raw_items) if item is not None]
    return ExtractedTransaction(items=items, destination=_optional_text(data.get("destination")))


def build_control_row(raw: Any) -> ExtractedControlRow | None:
    if not isinstance(raw, dict):
        return None
    model = normalize_item_name(raw.get("model", ""))
    quantity = parse_quantity(raw.get("quantity"))
    if not model or quantity is None:
        return None
    delivery_date = str(raw.get("deliveryDate") or "").strip()
    return ExtractedControlRow(
        delivery_date=delivery_date,
        model=model,
        quantity=quantity,
        destination=_optional_text(raw.get("destination")),
    )


def build_control_rows(data: Any) -> ControlRows:
    """Build control rows from a JSON array, or an object with a 'rows' array.

    Raises:
        PayloadValidationError: if no row list can be found.
    """
    if isinstance(data, dict):
        data = data.get("rows")
    if not isinstance(data, list):
        raise PayloadValidationError("Control sheet payload must be a list of rows")
    return [row for row in (build_control_row(raw) for raw in data) if row is not None]


def build_payload(data: Any, document_type: DocumentType) -> ExtractionPayload:
    if document_type.is_control_sheet:
        return build_control_rows(data)
    return build_transaction(data)
