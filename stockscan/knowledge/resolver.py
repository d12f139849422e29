import re
from collections.abc import Sequence
from typing import TypeVar

from stockscan.knowledge.models import LocalAnswer, Transaction
from stockscan.knowledge.snapshot import (
    ItemIndexEntry,
    KnowledgeSnapshot,
    PartnerIndexEntry,
    parse_timestamp,
    sanitize,
)
from stockscan.logging.logger import Log

E = TypeVar("E", ItemIndexEntry, PartnerIndexEntry)


def _vocabulary(*stems: str) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(stem) for stem in stems) + ")")


STOCK_WORDS = _vocabulary("stock", "inventario", "existencia", "inventory")
OUTCOME_WORDS = _vocabulary("venta", "vend", "egreso", "salida", "sale", "outflow", "outcome")
INCOME_WORDS = _vocabulary("ingreso", "compra", "entrada", "income", "inflow", "purchase")
PARTNER_WORDS = _vocabulary("cliente", "destino", "proveedor", "partner", "customer", "destination")
RECENT_WORDS = _vocabulary("ultim", "recent", "latest", "last")
COUNT_WORDS = _vocabulary("cuant", "total", "count", "how many")

_NUMBER_RE = re.compile(r"\b(\d+)\b")

DEFAULT_RECENT = 5
MAX_RECENT = 20


def find_match(entries: Sequence[E], question: str) -> E | None:
    """First entry whose key is a substring of the question or vice versa."""
    if not question:
        return None
    for entry in entries:
        if entry.key in question or question in entry.key:
            return entry
    return None


def requested_count(question: str) -> int:
    match = _NUMBER_RE.search(question)
    if match is None:
        return DEFAULT_RECENT
    return max(1, min(int(match.group(1)), MAX_RECENT))


class LocalKnowledgeResolver:
    """Answers common inventory questions from a snapshot, without remote calls.

    Rules are evaluated in a fixed order and the first match wins:
    item stock, outcome listing or totals, income listing or totals,
    partner totals. ``resolve`` returns None when no rule applies.
    """

    def resolve(self, snapshot: KnowledgeSnapshot, question: str) -> LocalAnswer | None:
        clean = sanitize(question)
        if not clean:
            return None

        item_entry = find_match(snapshot.item_index, clean)
        if item_entry is not None and STOCK_WORDS.search(clean):
            return self._stock_answer(snapshot, item_entry)

        if OUTCOME_WORDS.search(clean):
            return self._movement_answer(snapshot, clean, snapshot.outcomes, "outcome", "egresos")

        if INCOME_WORDS.search(clean):
            return self._movement_answer(snapshot, clean, snapshot.incomes, "income", "ingresos")

        if PARTNER_WORDS.search(clean):
            partner_entry = find_match(snapshot.partner_index, clean)
            if partner_entry is not None:
                return self._partner_answer(snapshot, partner_entry)

        Log.debug(f"No local answer for question: {question!r}")
        return None

    def _stock_answer(self, snapshot: KnowledgeSnapshot, entry: ItemIndexEntry) -> LocalAnswer:
        stock = snapshot.stock_of(entry.item.id)
        return LocalAnswer(
            kind="stock",
            text=f"El stock actual de {entry.item.name} es {stock} unidades.",
            data={"itemId": entry.item.id, "itemName": entry.item.name, "stock": stock},
        )

    def _movement_answer(
        self,
        snapshot: KnowledgeSnapshot,
        question: str,
        transactions: Sequence[Transaction],
        kind: str,
        noun: str,
    ) -> LocalAnswer:
        if COUNT_WORDS.search(question) and not RECENT_WORDS.search(question):
            total = sum(tx.quantity for tx in transactions)
            return LocalAnswer(
                kind=f"{kind}_summary",
                text=f"Hay {len(transactions)} {noun} registrados con un total de {total} unidades.",
                data={"count": len(transactions), "totalUnits": total},
            )

        limit = requested_count(question)
        recent = list(transactions[:limit])
        total = sum(tx.quantity for tx in recent)
        if not recent:
            text = f"No hay {noun} registrados."
        else:
            lines = [self._describe(snapshot, tx) for tx in recent]
            text = (
                f"Últimos {len(recent)} {noun} ({total} unidades en total):\n"
                + "\n".join(lines)
            )
        return LocalAnswer(
            kind=f"{kind}_recent",
            text=text,
            data={
                "limit": limit,
                "totalUnits": total,
                "transactions": [tx.id for tx in recent],
            },
        )

    def _partner_answer(self, snapshot: KnowledgeSnapshot, entry: PartnerIndexEntry) -> LocalAnswer:
        matched = [tx for tx in snapshot.outcomes if self._belongs_to(tx, entry)]
        total = sum(tx.quantity for tx in matched)
        return LocalAnswer(
            kind="partner_summary",
            text=(
                f"{entry.name} tiene {len(matched)} egresos registrados "
                f"con un total de {total} unidades."
            ),
            data={
                "partnerId": entry.partner_id,
                "partnerName": entry.name,
                "count": len(matched),
                "totalUnits": total,
            },
        )

    @staticmethod
    def _belongs_to(tx: Transaction, entry: PartnerIndexEntry) -> bool:
        if tx.partner_id:
            return tx.partner_id == entry.partner_id
        return sanitize(tx.destination) == entry.key

    @staticmethod
    def _describe(snapshot: KnowledgeSnapshot, tx: Transaction) -> str:
        parsed = parse_timestamp(tx.created_at)
        when = parsed.date().isoformat() if parsed is not None else "sin fecha"
        line = f"- {when}: {snapshot.item_name(tx.item_id)} x{tx.quantity}"
        partner = snapshot.partner_name(tx)
        if partner:
            line += f" ({partner})"
        return line
