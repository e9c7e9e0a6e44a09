"""
app/normalizers package marker.
"""

from app.normalizers.value_normalizer import DEFAULT_NAIVE_TIMEZONE, ValueNormalizer

__all__ = [
    "DEFAULT_NAIVE_TIMEZONE",
    "ValueNormalizer",
]
