from collections.abc import Callable, Sequence
from typing import TypeVar

from stockscan.logging.logger import Log
from stockscan.processor.models import DocumentType, ExtractionPayload, ProcessedDocument
from stockscan.providers.base import BaseRemoteProvider
from stockscan.providers.exceptions import ProviderChainError, RemoteUnavailableError
from stockscan.providers.models import ChatMessage

T = TypeVar("T")


class ProviderFallbackChain:
    """Ordered remote providers tried one after another until one succeeds.

    Providers without credentials are skipped silently. Calls are strictly
    sequential: a provider is only invoked after the previous one failed.
    """

    DISABLED_LABEL = "Remote disabled"
    UNCONFIGURED_LABEL = "No remote provider configured"

    def __init__(
        self,
        providers: Sequence[BaseRemoteProvider],
        *,
        disabled: bool = False,
    ) -> None:
        self._providers = list(providers)
        self._disabled = disabled
        self._last_successful: str | None = None

    @property
    def providers(self) -> list[BaseRemoteProvider]:
        return list(self._providers)

    @property
    def configured(self) -> list[BaseRemoteProvider]:
        if self._disabled:
            return []
        return [provider for provider in self._providers if provider.is_configured]

    @property
    def is_available(self) -> bool:
        return bool(self.configured)

    @property
    def last_successful_provider(self) -> str | None:
        """Name of the provider that served the most recent successful call."""
        return self._last_successful

    @property
    def label(self) -> str:
        """Human-readable chain description, e.g. "OpenAI → Gemini"."""
        if self._disabled:
            return self.DISABLED_LABEL
        shown = self.configured or self._providers
        if not shown:
            return self.UNCONFIGURED_LABEL
        return " → ".join(provider.label for provider in shown)

    @property
    def active_provider(self) -> str:
        """Name of the provider tried first, or "none"."""
        if self._disabled:
            return "none"
        shown = self.configured or self._providers
        if not shown:
            return "none"
        return shown[0].name

    def extract(
        self,
        document: ProcessedDocument,
        document_type: DocumentType,
    ) -> ExtractionPayload:
        """Extract a payload from the document using the first provider that succeeds.

        Raises:
            RemoteUnavailableError: if remote is disabled or no provider is configured.
            ProviderChainError: if every configured provider failed.
        """
        if document_type.is_control_sheet:
            return self._run("control sheet extraction", lambda p: p.extract_control_sheet(document))
        return self._run("transaction extraction", lambda p: p.extract_transaction(document))

    def answer(
        self,
        context: str,
        question: str,
        history: Sequence[ChatMessage] = (),
    ) -> str:
        return self._run("assistant answer", lambda p: p.answer(context, question, history))

    def _run(self, operation: str, call: Callable[[BaseRemoteProvider], T]) -> T:
        if self._disabled:
            raise RemoteUnavailableError("Remote analysis is disabled")
        configured = self.configured
        if not configured:
            raise RemoteUnavailableError("No remote AI provider has credentials configured")

        failures: list[tuple[str, str]] = []
        for provider in configured:
            Log.info(f"Trying {provider.label} for {operation}")
            try:
                result = call(provider)
            except Exception as exc:
                Log.warning(f"{provider.label} failed for {operation}: {exc}")
                failures.append((provider.label, str(exc) or type(exc).__name__))
                continue
            self._last_successful = provider.name
            Log.info(f"{provider.label} served {operation}")
            return result

        raise ProviderChainError(failures)
