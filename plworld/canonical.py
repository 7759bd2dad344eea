"""
canonical.py

Normal forms used for cache keys and machine-readable output.
"""
import unicodedata
import json
from typing import Any


def canonicalize_formula(formula_text: str) -> str:
    """
    Formula text as the parser and its cache see it.

    NFKC folds compatibility characters onto the plain operator symbols, and
    any run of whitespace becomes one space, so "p  ∧\\tq" and "p ∧ q" share
    one cache entry.
    """
    return " ".join(unicodedata.normalize("NFKC", formula_text).split())


def canonical_json(obj: Any) -> str:
    """JSON with sorted keys and no padding. Formula symbols are written as-is; NaN is refused."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
