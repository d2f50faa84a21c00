"""Rule encoding, decoding and selectors."""
from .models import FIELD_NAMES, MAX_FIELDS, PolicyFilter, PolicyRule, StoredDocument
from .codec import decode, encode, section_of
from .selectors import build_selector, field_range_constraints, filter_selector

__all__ = [
    "FIELD_NAMES",
    "MAX_FIELDS",
    "PolicyFilter",
    "PolicyRule",
    "StoredDocument",
    "decode",
    "encode",
    "section_of",
    "build_selector",
    "field_range_constraints",
    "filter_selector",
]
