from datetime import datetime, timezone

from stockscan.knowledge.models import Item, Partner, Transaction, TransactionType
from stockscan.knowledge.snapshot import build_snapshot, parse_timestamp, sanitize

INCOME = TransactionType.INCOME
OUTCOME = TransactionType.OUTCOME


def _make_tx(tx_id: str, tx_type: TransactionType, quantity: int, **kwargs: object) -> Transaction:
    return Transaction(id=tx_id, item_id=kwargs.pop("item_id", "i1"), type=tx_type, quantity=quantity, **kwargs)


class TestSanitize:
    def test_strips_accents_case_and_punctuation(self) -> None:
        assert sanitize("¿Cuánto  STOCK hay?") == "cuanto stock hay"

    def test_none_is_empty(self) -> None:
        assert sanitize(None) == ""


class TestParseTimestamp:
    def test_zulu_suffix(self) -> None:
        assert parse_timestamp("2024-05-01T10:00:00Z") == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)

    def test_naive_values_are_utc(self) -> None:
        assert parse_timestamp("2024-05-01T10:00:00").tzinfo == timezone.utc

    def test_unparseable_is_none(self) -> None:
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None


class TestBuildSnapshot:
    def test_stock_is_signed_sum_per_item(self) -> None:
        snapshot = build_snapshot(
            [Item(id="i1", name="Modulo Hex"), Item(id="i2", name="Chapa Lisa")],
            [
                _make_tx("t1", INCOME, 10),
                _make_tx("t2", OUTCOME, 3),
                _make_tx("t3", OUTCOME, 2, item_id="i3"),
            ],
        )
        assert snapshot.stock_of("i1") == 7
        assert snapshot.stock_of("i2") == 0
        assert snapshot.stock_of("i3") == -2
        assert snapshot.stock_of("missing") == 0

    def test_transactions_sorted_newest_first_with_unparseable_first(self) -> None:
        snapshot = build_snapshot(
            [],
            [
                _make_tx("old", INCOME, 1, created_at="2024-05-01T10:00:00Z"),
                _make_tx("bad", INCOME, 1, created_at="not a date"),
                _make_tx("new", OUTCOME, 1, created_at="2024-05-03T10:00:00"),
                _make_tx("none", OUTCOME, 1),
            ],
        )
        assert [tx.id for tx in snapshot.transactions] == ["bad", "none", "new", "old"]
        assert [tx.id for tx in snapshot.outcomes] == ["none", "new"]
        assert [tx.id for tx in snapshot.incomes] == ["bad", "old"]

    def test_partner_index_prefers_registered_partners(self) -> None:
        snapshot = build_snapshot(
            [],
            [
                _make_tx("t1", OUTCOME, 1, destination="Obra  Norte"),
                _make_tx("t2", OUTCOME, 1, destination="CONSTRUCTORA SUR"),
                _make_tx("t3", OUTCOME, 1, destination="obra norte"),
            ],
            [Partner(id="p1", name="Constructora Sur")],
        )
        entries = [(e.key, e.name, e.partner_id) for e in snapshot.partner_index]
        assert entries == [
            ("constructora sur", "Constructora Sur", "p1"),
            ("obra norte", "Obra Norte", None),
        ]

    def test_item_name_falls_back_to_id(self) -> None:
        snapshot = build_snapshot([Item(id="i1", name="Modulo Hex")], [])
        assert snapshot.item_name("i1") == "Modulo Hex"
        assert snapshot.item_name("i9") == "i9"

    def test_partner_name_resolution(self) -> None:
        snapshot = build_snapshot([], [], [Partner(id="p1", name="Constructora Sur")])
        assert snapshot.partner_name(_make_tx("t", OUTCOME, 1, partner_id="p1")) == "Constructora Sur"
        assert snapshot.partner_name(_make_tx("t", OUTCOME, 1, destination="Obra")) == "Obra"
        assert snapshot.partner_name(_make_tx("t", OUTCOME, 1)) is None
