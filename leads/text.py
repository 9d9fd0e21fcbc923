"""Turkish-aware text folding shared by header matching and note mining."""

import math
import unicodedata
from typing import Any

_I_VARIANTS = str.maketrans({"İ": "i", "I": "i", "ı": "i"})


def fold(text: str) -> str:
    """
    Reduce text to a lowercase, accent-free form.

    Dotted and dotless i collapse to "i" so "KİRALIK", "Kiralık" and
    "kiralik" all fold to "kiralik".
    """
    text = text.translate(_I_VARIANTS)
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return text.lower()


def header_key(header: str) -> str:
    """Folded header with embedded newlines and repeated spaces collapsed."""
    return " ".join(fold(str(header)).split())


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def as_text(value: Any) -> str:
    """Render a raw cell value as a trimmed string ("" for blanks)."""
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
