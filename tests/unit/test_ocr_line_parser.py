from stockscan.ocr.line_parser import (
    clean_line,
    find_destination,
    parse_control_lines,
    parse_trailing_quantity,
    parse_transaction_lines,
    split_lines,
)
from stockscan.processor.models import ExtractedControlRow, ItemType


class TestHelpers:
    def test_split_lines_drops_blank(self) -> None:
        assert split_lines(" a \n\n  b\n   ") == ["a", "b"]

    def test_clean_line_removes_noise(self) -> None:
        assert clean_line("Chapa* Hex #3!") == "Chapa Hex 3"

    def test_find_destination(self) -> None:
        lines = ["REMITO 001", "Señores: Obra Norte", "Chapa Hex 3"]
        assert find_destination(lines) == (1, "Obra Norte")

    def test_find_destination_absent(self) -> None:
        assert find_destination(["Chapa Hex 3"]) == (-1, None)

    def test_parse_trailing_quantity(self) -> None:
        assert parse_trailing_quantity("Modulo JC250 x 12") == 12
        assert parse_trailing_quantity("sin cantidad") is None


class TestParseTransactionLines:
    def test_items_and_destination(self) -> None:
        lines = ["Destino: Obra Norte", "Chapa Hex 3", "modulos jc 250   2", "Total", "ab 4"]
        result = parse_transaction_lines(lines)

        assert result.destination == "Obra Norte"
        assert [(item.item_name, item.quantity) for item in result.items] == [
            ("Chapa HEX", 3),
            ("Modulo JC250", 2),
        ]
        assert result.items[0].item_type is ItemType.CHAPA

    def test_no_quantities_gives_empty(self) -> None:
        assert parse_transaction_lines(["hola", "mundo"]).is_empty


class TestParseControlLines:
    def test_rows_carry_destination_forward(self) -> None:
        lines = [
            "PLANILLA DE CONTROL",
            "12/03/24 Acme - Modulo Hex 4",
            "13/03 Chapa Hex 2",
            "sin fecha 5",
        ]
        assert parse_control_lines(lines) == [
            ExtractedControlRow(delivery_date="12/03/24", model="Modulo HEX", quantity=4, destination="Acme"),
            ExtractedControlRow(delivery_date="13/03", model="Chapa HEX", quantity=2, destination="Acme"),
        ]

    def test_zero_quantity_rows_are_dropped(self) -> None:
        assert parse_control_lines(["12/03 Acme - Modulo 0"]) == []
