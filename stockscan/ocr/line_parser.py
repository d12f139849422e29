"""Heuristics turning raw OCR lines into items and control-sheet rows."""

import re

from stockscan.normalization.names import collapse_whitespace, detect_item_type, normalize_item_name
from stockscan.processor.models import ControlRows, ExtractedControlRow, ExtractedTransaction, LineItem

_UNWANTED_CHARS_RE = re.compile(r"[^A-Za-z0-9ÁÉÍÓÚÜÑáéíóúüñ/\-\s]")
_DESTINATION_LINE_RE = re.compile(r"destino|señor|sra|sr\.?", re.IGNORECASE)
_DESTINATION_LABEL_RE = re.compile(r"destino:?|señor(?:es)?:?|sra\.?:?|sr\.?:?", re.IGNORECASE)
_TRAILING_QUANTITY_RE = re.compile(r"(-?\d{1,5})(?!.*\d)")
_DATE_RE = re.compile(r"(\d{1,2}/\d{1,2}(?:/\d{2,4})?)")
_WIDE_GAP_RE = re.compile(r"\s{2,}")

_MIN_NAME_LEN = 3
_MIN_CONTROL_LINE_LEN = 5


def split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def clean_line(line: str) -> str:
    return _UNWANTED_CHARS_RE.sub("", line).strip()


def find_destination(lines: list[str]) -> tuple[int, str | None]:
    """Return (line index, destination) of the first recipient line, or (-1, None)."""
    for index, line in enumerate(lines):
        if _DESTINATION_LINE_RE.search(line):
            value = collapse_whitespace(_DESTINATION_LABEL_RE.sub("", line, count=1))
            return index, value or None
    return -1, None


def parse_trailing_quantity(line: str) -> int | None:
    match = _TRAILING_QUANTITY_RE.search(line)
    if not match:
        return None
    return abs(int(match.group(1)))


def parse_transaction_lines(lines: list[str]) -> ExtractedTransaction:
    destination_index, destination = find_destination(lines)
    items: list[LineItem] = []
    for index, raw_line in enumerate(lines):
        if index == destination_index:
            continue
        line = clean_line(raw_line)
        quantity = parse_trailing_quantity(line)
        if not quantity:
            continue
        name_part = _TRAILING_QUANTITY_RE.sub("", line, count=1).strip()
        if len(name_part) < _MIN_NAME_LEN:
            continue
        name = normalize_item_name(name_part)
        items.append(LineItem(item_name=name, quantity=quantity, item_type=detect_item_type(name)))
    return ExtractedTransaction(items=items, destination=destination)


def _split_destination(remainder: str) -> tuple[str | None, str]:
    if " - " in remainder:
        destination, model = remainder.split(" - ", 1)
        return destination.strip() or None, model.strip()
    segments = _WIDE_GAP_RE.split(remainder)
    if len(segments) >= 2:
        return segments[0].strip() or None, " ".join(segments[1:]).strip()
    parts = remainder.split(" ")
    if re.search(r"[A-Za-z]{3,}", remainder) and len(parts) > 2:
        return " ".join(parts[:-2]), " ".join(parts[-2:])
    return None, remainder


def parse_control_lines(lines: list[str]) -> ControlRows:
    """Rows need a dd/mm[/yy] date and a trailing quantity.

    A row without its own destination inherits the previous row's.
    """
    rows: ControlRows = []
    last_destination: str | None = None
    for raw_line in lines:
        line = clean_line(raw_line)
        if len(line) < _MIN_CONTROL_LINE_LEN:
            continue
        date_match = _DATE_RE.search(line)
        if not date_match:
            continue
        without_date = line.replace(date_match.group(1), " ", 1)
        quantity_match = _TRAILING_QUANTITY_RE.search(without_date)
        if not quantity_match:
            continue
        quantity = abs(int(quantity_match.group(1)))
        remainder = (
            without_date[: quantity_match.start()] + " " + without_date[quantity_match.end():]
        )
        remainder = remainder.strip()
        if not remainder:
            continue
        destination, model = _split_destination(remainder)
        if destination:
            last_destination = destination
        else:
            destination = last_destination
        model_name = normalize_item_name(model)
        if not model_name or quantity <= 0:
            continue
        rows.append(
            ExtractedControlRow(
                delivery_date=date_match.group(1),
                model=model_name,
                quantity=quantity,
                destination=collapse_whitespace(destination) if destination else None,
            )
        )
    return rows
