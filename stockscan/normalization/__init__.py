from stockscan.normalization.merge import merge_transaction, normalize_payload
from stockscan.normalization.names import (
    canonical_key,
    detect_item_type,
    normalize_item_name,
    normalize_partner_name,
)
from stockscan.normalization.validator import build_payload

__all__ = [
    "build_payload",
    "canonical_key",
    "detect_item_type",
    "merge_transaction",
    "normalize_item_name",
    "normalize_partner_name",
    "normalize_payload",
]
