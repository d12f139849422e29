from abc import ABC, abstractmethod
from collections.abc import Sequence

from stockscan.processor.models import ControlRows, ExtractedTransaction, ProcessedDocument
from stockscan.providers.models import ChatMessage


class BaseRemoteProvider(ABC):
    """Uniform capability interface for remote AI backends."""

    name: str = ""
    label: str = ""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the provider has the credentials it needs."""

    @abstractmethod
    def extract_transaction(self, document: ProcessedDocument) -> ExtractedTransaction:
        """Read destination and items from a delivery note image.

        Raises:
            ProviderError: on any failure, with a human-readable message.
        """

    @abstractmethod
    def extract_control_sheet(self, document: ProcessedDocument) -> ControlRows:
        """Read rows from a control sheet image.

        Raises:
            ProviderError: on any failure, with a human-readable message.
        """

    @abstractmethod
    def answer(
        self,
        context: str,
        question: str,
        history: Sequence[ChatMessage] = (),
    ) -> str:
        """Answer a free-text question about the JSON inventory context.

        Raises:
            ProviderError: on any failure, with a human-readable message.
        """
