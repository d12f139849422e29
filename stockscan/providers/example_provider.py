"""Offline provider returning fixed empty results.

Handy for local development and tests, and as a template when adding a
provider: implement BaseRemoteProvider and register it in ProviderChainFactory.
"""

from collections.abc import Sequence
from typing import ClassVar

from stockscan.processor.models import ControlRows, ExtractedTransaction, ProcessedDocument
from stockscan.providers.base import BaseRemoteProvider
from stockscan.providers.models import ChatMessage


class ExampleProvider(BaseRemoteProvider):
    """No network calls. Always configured, never finds anything."""

    DEFAULT_ANSWER: ClassVar[str] = (
        "No tengo suficiente información para responder a esa pregunta."
    )

    def __init__(self, *, name: str = "example", label: str = "Example") -> None:
        self.name = name
        self.label = label

    @property
    def is_configured(self) -> bool:
        return True

    def extract_transaction(self, document: ProcessedDocument) -> ExtractedTransaction:
        _ = document
        return ExtractedTransaction()

    def extract_control_sheet(self, document: ProcessedDocument) -> ControlRows:
        _ = document
        return []

    def answer(
        self,
        context: str,
        question: str,
        history: Sequence[ChatMessage] = (),
    ) -> str:
        _ = context, question, history
        return self.DEFAULT_ANSWER
