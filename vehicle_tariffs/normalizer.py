"""
Region label normalization.

Two labels that normalize to the same key are treated as the same region
for tariff lookup, regardless of case, accents or spacing:

    "  Valle d'Aosta " -> "valle d'aosta"
    "EMILIA   ROMAGNA" -> "emilia romagna"
    "Sicìlia"          -> "sicilia"
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any

_WHITESPACE_RUN = re.compile(r"\s+")


def strip_diacritics(text: str) -> str:
    """Decompose accented characters and drop the combining marks."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: Any) -> str:
    """
    Convert a free-text label into its canonical comparison key.

    None becomes an empty string; any other value is converted with str().
    Never raises.
    """
    if text is None:
        return ""
    key = str(text).strip().lower()
    key = strip_diacritics(key)
    return _WHITESPACE_RUN.sub(" ", key)
