from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from stockscan.processor.models import ItemType


class TransactionType(str, Enum):
    INCOME = "INCOME"
    OUTCOME = "OUTCOME"


@dataclass(frozen=True)
class Item:
    id: str
    name: str
    type: ItemType = ItemType.MODULO


@dataclass(frozen=True)
class Partner:
    id: str
    name: str


@dataclass(frozen=True)
class Transaction:
    """A stock movement. Outcomes name a partner by id or by free-text destination."""

    id: str
    item_id: str
    type: TransactionType
    quantity: int
    created_at: datetime | str | None = None
    partner_id: str | None = None
    destination: str | None = None

    @property
    def signed_quantity(self) -> int:
        if self.type is TransactionType.INCOME:
            return self.quantity
        return -self.quantity


@dataclass(frozen=True)
class LocalAnswer:
    """Deterministic answer produced without any remote call."""

    kind: str
    text: str
    data: dict[str, object]


@dataclass(frozen=True)
class AssistantReply:
    text: str
    source: str
    provider: str | None = None
