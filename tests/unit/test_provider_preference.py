from stockscan.providers.preference import DEFAULT_PREFERENCE, parse_provider_preference


class TestParseProviderPreference:
    def test_ordered_list(self) -> None:
        assert parse_provider_preference("gemini, OpenAI") == (["gemini", "openai"], False)

    def test_disable_sentinel_wins_anywhere(self) -> None:
        assert parse_provider_preference("openai,none,gemini") == ([], True)
        assert parse_provider_preference(" NONE ") == ([], True)

    def test_unknown_names_are_skipped(self) -> None:
        assert parse_provider_preference("claude,groq") == (["groq"], False)

    def test_duplicates_collapse(self) -> None:
        assert parse_provider_preference("openai,gemini,openai") == (["openai", "gemini"], False)

    def test_empty_falls_back_to_default(self) -> None:
        assert parse_provider_preference("") == (list(DEFAULT_PREFERENCE), False)
        assert parse_provider_preference(None) == (list(DEFAULT_PREFERENCE), False)
        assert parse_provider_preference("unknown") == (list(DEFAULT_PREFERENCE), False)
