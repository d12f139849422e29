"""Merge/dedup step applied to every successful extraction before caching."""

from stockscan.normalization.names import canonical_key, normalize_item_name, normalize_partner_name
from stockscan.processor.models import (
    ControlRows,
    ExtractedControlRow,
    ExtractedTransaction,
    ExtractionPayload,
    LineItem,
)


def merge_transaction(data: ExtractedTransaction) -> ExtractedTransaction:
    """Normalize names and merge items sharing a canonical key by summing quantities.

    The first occurrence keeps its position, display name and item type.
    Items with an empty name or non-positive quantity are dropped.
    """
    merged: dict[str, LineItem] = {}
    for item in data.items:
        name = normalize_item_name(item.item_name)
        if not name or item.quantity <= 0:
            continue
        key = canonical_key(name)
        existing = merged.get(key)
        if existing is None:
            merged[key] = LineItem(item_name=name, quantity=item.quantity, item_type=item.item_type)
        else:
            merged[key] = LineItem(
                item_name=existing.item_name,
                quantity=existing.quantity + item.quantity,
                item_type=existing.item_type,
            )
    destination = normalize_partner_name(data.destination) if data.destination else ""
    return ExtractedTransaction(items=list(merged.values()), destination=destination or None)


def clean_control_rows(rows: ControlRows) -> ControlRows:
    """Normalize names and drop rows with an empty model or non-positive quantity."""
    cleaned: ControlRows = []
    for row in rows:
        model = normalize_item_name(row.model)
        if not model or row.quantity <= 0:
            continue
        destination = normalize_partner_name(row.destination) if row.destination else ""
        cleaned.append(
            ExtractedControlRow(
                delivery_date=row.delivery_date.strip(),
                model=model,
                quantity=row.quantity,
                destination=destination or None,
            )
        )
    return cleaned


def normalize_payload(payload: ExtractionPayload) -> ExtractionPayload:
    if isinstance(payload, ExtractedTransaction):
        return merge_transaction(payload)
    return clean_control_rows(payload)
