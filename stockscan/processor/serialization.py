"""JSON-ready conversion of extraction payloads (camelCase on the wire)."""

from typing import Any

from stockscan.normalization.validator import build_payload
from stockscan.processor.models import (
    DocumentType,
    ExtractedControlRow,
    ExtractedTransaction,
    ExtractionPayload,
)


def _control_row_to_json(row: ExtractedControlRow) -> dict[str, Any]:
    return {
        "deliveryDate": row.delivery_date,
        "destination": row.destination,
        "model": row.model,
        "quantity": row.quantity,
    }


def payload_to_json(payload: ExtractionPayload) -> dict[str, Any] | list[dict[str, Any]]:
    if isinstance(payload, ExtractedTransaction):
        return {
            "destination": payload.destination,
            "items": [
                {
                    "itemName": item.item_name,
                    "quantity": item.quantity,
                    "itemType": item.item_type.value,
                }
                for item in payload.items
            ],
        }
    return [_control_row_to_json(row) for row in payload]


def payload_from_json(data: Any, document_type: DocumentType) -> ExtractionPayload:
    return build_payload(data, document_type)
