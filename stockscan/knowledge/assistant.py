import json
from collections.abc import Iterable, Sequence
from datetime import datetime

from stockscan.knowledge.models import AssistantReply, Item, Partner, Transaction
from stockscan.knowledge.resolver import LocalKnowledgeResolver
from stockscan.knowledge.snapshot import KnowledgeSnapshot, build_snapshot
from stockscan.logging.logger import Log
from stockscan.providers.chain import ProviderFallbackChain
from stockscan.providers.exceptions import RemoteUnavailableError
from stockscan.providers.models import ChatMessage

LOCAL_SOURCE = "local"
REMOTE_SOURCE = "remote"


def _timestamp_text(value: datetime | str | None) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def build_inventory_context(snapshot: KnowledgeSnapshot, recent_limit: int = 20) -> str:
    """Serialize the snapshot into the JSON context sent to remote providers."""
    context = {
        "items": [
            {
                "id": item.id,
                "name": item.name,
                "type": item.type.value,
                "stock": snapshot.stock_of(item.id),
            }
            for item in snapshot.items
        ],
        "partners": [{"id": partner.id, "name": partner.name} for partner in snapshot.partners],
        "recentTransactions": [
            {
                "type": tx.type.value,
                "itemName": snapshot.item_name(tx.item_id),
                "quantity": tx.quantity,
                "partner": snapshot.partner_name(tx),
                "createdAt": _timestamp_text(tx.created_at),
            }
            for tx in snapshot.transactions[: max(recent_limit, 0)]
        ],
    }
    return json.dumps(context, ensure_ascii=False, indent=2)


class InventoryAssistant:
    """Answers questions locally first, and through the provider chain otherwise."""

    def __init__(
        self,
        chain: ProviderFallbackChain,
        resolver: LocalKnowledgeResolver | None = None,
        *,
        recent_limit: int = 20,
    ) -> None:
        self._chain = chain
        self._resolver = resolver or LocalKnowledgeResolver()
        self._recent_limit = recent_limit
        self._snapshot = build_snapshot((), (), ())

    @property
    def snapshot(self) -> KnowledgeSnapshot:
        return self._snapshot

    def refresh(
        self,
        items: Iterable[Item],
        transactions: Iterable[Transaction],
        partners: Iterable[Partner] = (),
    ) -> KnowledgeSnapshot:
        self._snapshot = build_snapshot(items, transactions, partners)
        Log.info(
            f"Knowledge snapshot rebuilt: {len(self._snapshot.items)} items, "
            f"{len(self._snapshot.transactions)} transactions, "
            f"{len(self._snapshot.partner_index)} partners"
        )
        return self._snapshot

    def ask(
        self,
        question: str,
        history: Sequence[ChatMessage] = (),
        allow_remote: bool = True,
    ) -> AssistantReply:
        """Answer a question about the current snapshot.

        Raises:
            RemoteUnavailableError: no local answer and remote use is not allowed
                or not configured.
            ProviderChainError: no local answer and every provider failed.
        """
        snapshot = self._snapshot
        local = self._resolver.resolve(snapshot, question)
        if local is not None:
            Log.info(f"Answered locally ({local.kind})")
            return AssistantReply(text=local.text, source=LOCAL_SOURCE)

        if not allow_remote:
            raise RemoteUnavailableError(
                "No local answer for this question and remote answers are not allowed"
            )

        context = build_inventory_context(snapshot, self._recent_limit)
        Log.debug(f"Remote assistant context:\n{context}")
        text = self._chain.answer(context, question, history)
        return AssistantReply(
            text=text,
            source=REMOTE_SOURCE,
            provider=self._chain.last_successful_provider,
        )
