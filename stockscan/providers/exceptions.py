class ProviderError(Exception):
    """Raised when a single remote provider call fails."""


class ProviderNetworkError(ProviderError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class RemoteUnavailableError(Exception):
    """Raised when remote analysis is disabled or no provider has credentials."""


class ProviderChainError(Exception):
    """Raised when every configured provider failed.

    The message lists each provider's label and error in attempt order.
    """

    def __init__(self, failures: list[tuple[str, str]]) -> None:
        self.failures = list(failures)
        super().__init__(" | ".join(f"{label}: {message}" for label, message in self.failures))
