from stockscan.logging.logger import Log

DISABLED = "none"

KNOWN_PROVIDERS: tuple[str, ...] = (
    "openai",
    "gemini",
    "openrouter",
    "groq",
    "ollama",
    "openai_compatible",
    "example",
)

DEFAULT_PREFERENCE: tuple[str, ...] = ("openai", "gemini")


def parse_provider_preference(raw: str | None) -> tuple[list[str], bool]:
    """Parse a comma-separated provider preference.

    Returns the ordered, de-duplicated provider names and whether remote
    analysis is disabled. "none" anywhere in the list disables remote
    entirely; unknown names are skipped; an empty list falls back to
    DEFAULT_PREFERENCE.
    """
    tokens = [token.strip().lower() for token in (raw or "").split(",")]
    tokens = [token for token in tokens if token]
    if DISABLED in tokens:
        return [], True

    names: list[str] = []
    for token in tokens:
        if token not in KNOWN_PROVIDERS:
            Log.warning(f"Ignoring unknown AI provider '{token}'. Choose from: {list(KNOWN_PROVIDERS)}")
            continue
        if token not in names:
            names.append(token)

    if not names:
        return list(DEFAULT_PREFERENCE), False
    return names, False
