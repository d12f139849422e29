from typing import ClassVar

from stockscan.config.settings import Settings
from stockscan.providers.base import BaseRemoteProvider
from stockscan.providers.chain import ProviderFallbackChain
from stockscan.providers.example_provider import ExampleProvider
from stockscan.providers.openai_provider import OpenAIProvider
from stockscan.providers.preference import KNOWN_PROVIDERS, parse_provider_preference


class ProviderChainFactory:
    """Builds the remote provider chain from the configured preference."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "ollama": "http://localhost:11434/v1",
    }

    LABELS: ClassVar[dict[str, str]] = {
        "openai": "OpenAI",
        "gemini": "Gemini",
        "openrouter": "OpenRouter",
        "groq": "Groq",
        "ollama": "Ollama",
        "openai_compatible": "OpenAI-compatible",
        "example": "Example",
    }

    @classmethod
    def create(cls, settings: Settings) -> ProviderFallbackChain:
        """Create the chain in preference order; "none" yields a disabled chain."""
        names, disabled = parse_provider_preference(settings.ai_provider)
        if disabled:
            return ProviderFallbackChain([], disabled=True)
        return ProviderFallbackChain([cls.create_provider(name, settings) for name in names])

    @classmethod
    def create_provider(cls, name: str, settings: Settings) -> BaseRemoteProvider:
        provider = name.lower()
        if provider not in KNOWN_PROVIDERS:
            raise ValueError(
                f"Unknown AI provider '{name}'. Choose from: {list(KNOWN_PROVIDERS)}"
            )
        if provider == "example":
            return ExampleProvider(name="example", label=cls.LABELS["example"])
        return OpenAIProvider(
            name=provider,
            label=cls.LABELS[provider],
            api_key=getattr(settings, f"{provider}_api_key") or "",
            model=getattr(settings, f"{provider}_model_name") or "",
            timeout_seconds=getattr(settings, f"{provider}_timeout_seconds") or 30,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "openai_compatible_base_url is required for ai_provider=openai_compatible"
                )
            return url
        return cls.OPENAI_COMPATIBLE_BASE_URLS[provider]
