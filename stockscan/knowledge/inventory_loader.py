import json
from pathlib import Path
from typing import Any

from stockscan.knowledge.exceptions import InventoryFormatError
from stockscan.knowledge.models import Item, Partner, Transaction, TransactionType
from stockscan.normalization.names import detect_item_type
from stockscan.processor.models import ItemType


def _text(record: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = record.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _records(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    records = data.get(key, [])
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise InventoryFormatError(f"'{key}' must be a list of objects")
    return records


def _item(record: dict[str, Any]) -> Item:
    item_id = _text(record, "id")
    name = _text(record, "name")
    if item_id is None or name is None:
        raise InventoryFormatError(f"Item requires id and name: {record}")
    raw_type = (_text(record, "type", "itemType") or "").upper()
    item_type = ItemType(raw_type) if raw_type in ItemType.__members__ else detect_item_type(name)
    return Item(id=item_id, name=name, type=item_type)


def _transaction(record: dict[str, Any], index: int) -> Transaction:
    item_id = _text(record, "itemId", "item_id")
    raw_type = (_text(record, "type") or "").upper()
    if item_id is None or raw_type not in TransactionType.__members__:
        raise InventoryFormatError(f"Transaction requires itemId and type INCOME/OUTCOME: {record}")
    quantity = record.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise InventoryFormatError(f"Transaction quantity must be a non-negative integer: {record}")
    return Transaction(
        id=_text(record, "id") or f"tx-{index}",
        item_id=item_id,
        type=TransactionType(raw_type),
        quantity=quantity,
        created_at=_text(record, "createdAt", "created_at"),
        partner_id=_text(record, "partnerId", "partner_id"),
        destination=_text(record, "destination"),
    )


def _partner(record: dict[str, Any]) -> Partner:
    partner_id = _text(record, "id")
    name = _text(record, "name")
    if partner_id is None or name is None:
        raise InventoryFormatError(f"Partner requires id and name: {record}")
    return Partner(id=partner_id, name=name)


def inventory_from_json(data: Any) -> tuple[list[Item], list[Transaction], list[Partner]]:
    """Read an inventory export: {"items": [...], "transactions": [...], "partners": [...]}."""
    if not isinstance(data, dict):
        raise InventoryFormatError("Inventory export must be a JSON object")
    items = [_item(record) for record in _records(data, "items")]
    transactions = [
        _transaction(record, index)
        for index, record in enumerate(_records(data, "transactions"))
    ]
    partners = [_partner(record) for record in _records(data, "partners")]
    return items, transactions, partners


def load_inventory(path: Path) -> tuple[list[Item], list[Transaction], list[Partner]]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InventoryFormatError(f"Cannot read inventory {path}: {exc.strerror or exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InventoryFormatError(f"Invalid inventory JSON in {path}: {exc}") from exc
    return inventory_from_json(data)
