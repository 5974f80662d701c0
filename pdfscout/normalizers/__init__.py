"""
Normalizers for raw document structures.

- OutlineNormalizer: bookmark tree → depth-bounded OutlineNode forest
"""

from pdfscout.normalizers.outline import (
    DestinationResolver,
    OutlineNormalizer,
    flatten_outline,
    normalize_outline,
    serialize_destination,
    summarize_outline,
)

__all__ = [
    "OutlineNormalizer",
    "DestinationResolver",
    "normalize_outline",
    "flatten_outline",
    "summarize_outline",
    "serialize_destination",
]
