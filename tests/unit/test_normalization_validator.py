import pytest

from stockscan.normalization.exceptions import PayloadValidationError
from stockscan.normalization.validator import (
    build_control_rows,
    build_line_item,
    build_payload,
    build_transaction,
    parse_quantity,
)
from stockscan.processor.models import DocumentType, ExtractedTransaction, ItemType


class TestParseQuantity:
    @pytest.mark.parametrize(("raw", "expected"), [(5, 5), ("7", 7), (" 3 ", 3), (4.0, 4)])
    def test_accepts_positive_integers(self, raw: object, expected: int) -> None:
        assert parse_quantity(raw) == expected

    @pytest.mark.parametrize("raw", [0, -2, "0", "-1", "2.5", 2.5, "abc", None, True, [], ""])
    def test_rejects_everything_else(self, raw: object) -> None:
        assert parse_quantity(raw) is None


class TestBuildLineItem:
    def test_uses_explicit_item_type(self) -> None:
        item = build_line_item({"itemName": "Soporte", "quantity": 2, "itemType": "chapa"})
        assert item is not None
        assert item.item_type is ItemType.CHAPA

    def test_detects_item_type_from_name(self) -> None:
        item = build_line_item({"name": "chapa jc 250", "quantity": "5"})
        assert item is not None
        assert item.item_name == "Chapa JC250"
        assert item.item_type is ItemType.CHAPA

    def test_drops_invalid_rows(self) -> None:
        assert build_line_item({"itemName": "", "quantity": 2}) is None
        assert build_line_item({"itemName": "Modulo", "quantity": 0}) is None
        assert build_line_item("not a dict") is None


class TestBuildTransaction:
    def test_valid_payload(self) -> None:
        result = build_transaction(
            {
                "destination": "  Obra   Norte ",
                "items": [
                    {"itemName": "Modulo Hex", "quantity": 3},
                    {"itemName": "Bad", "quantity": -1},
                ],
            }
        )
        assert isinstance(result, ExtractedTransaction)
        assert result.destination == "Obra Norte"
        assert [item.item_name for item in result.items] == ["Modulo HEX"]

    def test_blank_destination_becomes_none(self) -> None:
        result = build_transaction({"destination": "  ", "items": []})
        assert result.destination is None
        assert result.is_empty

    def test_rejects_non_object(self) -> None:
        with pytest.raises(PayloadValidationError, match="must be an object"):
            build_transaction([])

    def test_rejects_missing_items(self) -> None:
        with pytest.raises(PayloadValidationError, match="'items' must be a list"):
            build_transaction({"destination": "x"})


class TestBuildControlRows:
    def test_accepts_list_and_rows_object(self) -> None:
        row = {"deliveryDate": "12/03", "model": "modulo hex", "quantity": 4, "destination": "Acme"}
        assert build_control_rows([row]) == build_control_rows({"rows": [row]})
        rows = build_control_rows([row])
        assert rows[0].model == "Modulo HEX"
        assert rows[0].delivery_date == "12/03"
        assert rows[0].destination == "Acme"

    def test_delivery_date_is_optional(self) -> None:
        rows = build_control_rows([{"model": "Chapa", "quantity": 1}])
        assert rows[0].delivery_date == ""

    def test_only_invalid_rows_reduce_to_empty(self) -> None:
        rows = build_control_rows(
            [
                {"deliveryDate": "1/1", "model": "Chapa", "quantity": 0},
                {"deliveryDate": "1/1", "model": "", "quantity": 4},
                {"deliveryDate": "1/1", "model": "Chapa", "quantity": -3},
            ]
        )
        assert rows == []

    def test_rejects_non_list(self) -> None:
        with pytest.raises(PayloadValidationError):
            build_control_rows({"items": []})


class TestBuildPayload:
    def test_dispatches_by_document_type(self) -> None:
        assert isinstance(
            build_payload({"items": []}, DocumentType.TRANSACTION_INCOME), ExtractedTransaction
        )
        assert build_payload([], DocumentType.CONTROL_SHEET) == []
