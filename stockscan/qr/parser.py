"""Parsing of QR payloads printed on delivery notes and control sheets.

Structured JSON is tried first. When the text is not JSON, a delimited
grammar is used: records separated by newlines or ';', fields by ':', '|'
or ','.
"""

import json
import re
from typing import Any

from stockscan.normalization.exceptions import PayloadValidationError
from stockscan.normalization.names import detect_item_type, normalize_item_name
from stockscan.normalization.validator import (
    build_control_row,
    build_control_rows,
    build_transaction,
    parse_quantity,
)
from stockscan.processor.models import (
    ControlRows,
    DocumentType,
    ExtractedTransaction,
    ExtractionPayload,
    LineItem,
)

_RECORD_SEP_RE = re.compile(r"\n|;")
_FIELD_SEP_RE = re.compile(r"[:|,]")


class _NotJson(Exception):
    pass


def _load_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise _NotJson from exc


def _records(raw: str) -> list[list[str]]:
    records = [segment.strip() for segment in _RECORD_SEP_RE.split(raw)]
    return [
        [field.strip() for field in _FIELD_SEP_RE.split(record)]
        for record in records
        if record
    ]


def _parse_transaction_text(raw: str) -> ExtractedTransaction:
    items: list[LineItem] = []
    for fields in _records(raw):
        if len(fields) < 2:
            continue
        name = normalize_item_name(fields[0])
        quantity = parse_quantity(fields[1])
        if not name or quantity is None:
            continue
        items.append(LineItem(item_name=name, quantity=quantity, item_type=detect_item_type(name)))
    return ExtractedTransaction(items=items)


def _parse_control_text(raw: str) -> ControlRows:
    rows: ControlRows = []
    for fields in _records(raw):
        if len(fields) == 2:
            record = {"model": fields[0], "quantity": fields[1]}
        elif len(fields) == 3:
            record = {"deliveryDate": fields[0], "model": fields[1], "quantity": fields[2]}
        elif len(fields) >= 4:
            record = {
                "deliveryDate": fields[0],
                "destination": fields[1],
                "model": fields[2],
                "quantity": fields[3],
            }
        else:
            continue
        row = build_control_row(record)
        if row is not None:
            rows.append(row)
    return rows


def parse_qr_transaction(raw: str) -> ExtractedTransaction | None:
    try:
        data = _load_json(raw)
    except _NotJson:
        parsed = _parse_transaction_text(raw)
    else:
        try:
            parsed = build_transaction(data)
        except PayloadValidationError:
            return None
    return parsed if not parsed.is_empty else None


def parse_qr_control_sheet(raw: str) -> ControlRows | None:
    try:
        data = _load_json(raw)
    except _NotJson:
        rows = _parse_control_text(raw)
    else:
        try:
            rows = build_control_rows(data)
        except PayloadValidationError:
            return None
    return rows or None


def parse_qr_payload(raw: str, document_type: DocumentType) -> ExtractionPayload | None:
    """Parse QR text for the given document type; None when nothing usable decodes."""
    if not raw or not raw.strip():
        return None
    if document_type.is_control_sheet:
        return parse_qr_control_sheet(raw)
    return parse_qr_transaction(raw)
