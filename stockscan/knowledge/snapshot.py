"""Immutable inventory indices used to answer questions locally.

A snapshot is a pure function of (items, transactions, partners) and is
rebuilt from scratch whenever those collections change.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from stockscan.knowledge.models import Item, Partner, Transaction, TransactionType
from stockscan.normalization.names import collapse_whitespace, strip_diacritics

_PUNCTUATION_RE = re.compile(r"[^0-9a-z\s]")


def sanitize(text: object) -> str:
    """Lower-case, diacritic- and punctuation-free form used for search."""
    lowered = strip_diacritics(str(text or "")).lower()
    return collapse_whitespace(_PUNCTUATION_RE.sub("", lowered))


@dataclass(frozen=True)
class ItemIndexEntry:
    key: str
    item: Item


@dataclass(frozen=True)
class PartnerIndexEntry:
    key: str
    name: str
    partner_id: str | None = None


@dataclass(frozen=True)
class KnowledgeSnapshot:
    items: tuple[Item, ...] = ()
    partners: tuple[Partner, ...] = ()
    items_by_id: dict[str, Item] = field(default_factory=dict)
    partners_by_id: dict[str, Partner] = field(default_factory=dict)
    stock_by_item: dict[str, int] = field(default_factory=dict)
    transactions: tuple[Transaction, ...] = ()
    outcomes: tuple[Transaction, ...] = ()
    incomes: tuple[Transaction, ...] = ()
    item_index: tuple[ItemIndexEntry, ...] = ()
    partner_index: tuple[PartnerIndexEntry, ...] = ()

    def stock_of(self, item_id: str) -> int:
        return self.stock_by_item.get(item_id, 0)

    def item_name(self, item_id: str) -> str:
        item = self.items_by_id.get(item_id)
        return item.name if item is not None else item_id

    def partner_name(self, tx: Transaction) -> str | None:
        if tx.partner_id:
            partner = self.partners_by_id.get(tx.partner_id)
            if partner is not None:
                return partner.name
        return tx.destination or None


def parse_timestamp(value: datetime | str | None) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _newest_first_key(tx: Transaction) -> tuple[int, float]:
    # Unparseable timestamps sort ahead of everything else.
    parsed = parse_timestamp(tx.created_at)
    if parsed is None:
        return (0, 0.0)
    return (1, -parsed.timestamp())


def sort_newest_first(transactions: Iterable[Transaction]) -> tuple[Transaction, ...]:
    return tuple(sorted(transactions, key=_newest_first_key))


def _build_partner_index(
    partners: Iterable[Partner],
    transactions: Iterable[Transaction],
) -> tuple[PartnerIndexEntry, ...]:
    entries: dict[str, PartnerIndexEntry] = {}
    for partner in partners:
        key = sanitize(partner.name)
        if key and key not in entries:
            entries[key] = PartnerIndexEntry(key=key, name=partner.name, partner_id=partner.id)
    for tx in transactions:
        key = sanitize(tx.destination)
        if key and key not in entries:
            entries[key] = PartnerIndexEntry(key=key, name=collapse_whitespace(tx.destination or ""))
    return tuple(entries.values())


def build_snapshot(
    items: Iterable[Item],
    transactions: Iterable[Transaction],
    partners: Iterable[Partner] = (),
) -> KnowledgeSnapshot:
    items = tuple(items)
    transactions = tuple(transactions)
    partners = tuple(partners)

    stock: dict[str, int] = {item.id: 0 for item in items}
    for tx in transactions:
        stock[tx.item_id] = stock.get(tx.item_id, 0) + tx.signed_quantity

    ordered = sort_newest_first(transactions)
    item_index = tuple(
        ItemIndexEntry(key=sanitize(item.name), item=item)
        for item in items
        if sanitize(item.name)
    )

    return KnowledgeSnapshot(
        items=items,
        partners=partners,
        items_by_id={item.id: item for item in items},
        partners_by_id={partner.id: partner for partner in partners},
        stock_by_item=stock,
        transactions=ordered,
        outcomes=tuple(tx for tx in ordered if tx.type is TransactionType.OUTCOME),
        incomes=tuple(tx for tx in ordered if tx.type is TransactionType.INCOME),
        item_index=item_index,
        partner_index=_build_partner_index(partners, transactions),
    )
