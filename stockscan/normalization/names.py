"""Canonical forms for item and partner names.

Display normalization keeps names readable ("Chapa JC250"); the canonical key
is the identity used for merge, dedup and search ("chapajc250").
All functions are pure and never raise on odd input.
"""

import re
import unicodedata

from stockscan.processor.models import ItemType

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^0-9a-z]")
_CODE_SEPARATORS_RE = re.compile(r"[\s_\-]+")

_SINGULAR_FORMS: dict[str, str] = {
    "chapas": "chapa",
    "modulos": "modulo",
}

_CONNECTIVES = frozenset({"de", "del", "la", "el", "los", "las", "y", "con", "para", "por"})

_SHORT_TOKEN_MAX_LEN = 3


def strip_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def _format_token(token: str) -> str:
    lowered = token.lower()
    lowered = _SINGULAR_FORMS.get(lowered, lowered)
    if any(ch.isdigit() for ch in lowered):
        return _CODE_SEPARATORS_RE.sub("", lowered).upper()
    if lowered in _CONNECTIVES:
        return lowered
    if len(lowered) <= _SHORT_TOKEN_MAX_LEN:
        return lowered.upper()
    return lowered[:1].upper() + lowered[1:]


def _is_code_prefix(token: str) -> bool:
    return (
        token.isalpha()
        and token.isupper()
        and len(token) <= _SHORT_TOKEN_MAX_LEN
    )


def _join_split_codes(tokens: list[str]) -> list[str]:
    """Join a short code and a bare number that follows it: JC 250 -> JC250."""
    joined: list[str] = []
    for token in tokens:
        if joined and token.isdigit() and _is_code_prefix(joined[-1]):
            joined[-1] = joined[-1] + token
        else:
            joined.append(token)
    return joined


def normalize_item_name(raw: object) -> str:
    """Return the display-canonical form of an item name."""
    text = collapse_whitespace(strip_diacritics(str(raw or "")))
    if not text:
        return ""
    tokens = [_format_token(token) for token in text.split(" ") if token]
    return " ".join(_join_split_codes(tokens))


def normalize_partner_name(raw: object) -> str:
    """Return the display form of a partner name (trimmed, single-spaced)."""
    return collapse_whitespace(str(raw or ""))


def canonical_key(name: object) -> str:
    """Identity key: no diacritics, case-folded, alphanumerics only."""
    folded = strip_diacritics(str(name or "")).casefold()
    return _NON_ALNUM_RE.sub("", folded)


def detect_item_type(name: str) -> ItemType:
    if "chapa" in strip_diacritics(name).lower():
        return ItemType.CHAPA
    return ItemType.MODULO
