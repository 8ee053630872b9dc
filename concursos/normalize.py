"""
Profession label normalizers used as the comparison key when matching.

Matching is exact-string by default. The other modes are opt-in through
configuration (CONCURSOS_PROFESSION_MATCH).
"""

import unicodedata
from typing import Callable, Dict

Normalizer = Callable[[str], str]


def exact(label: str) -> str:
    return label


def casefold(label: str) -> str:
    return " ".join(label.split()).casefold()


def accent_insensitive(label: str) -> str:
    decomposed = unicodedata.normalize("NFKD", casefold(label))
    return "".join(c for c in decomposed if not unicodedata.combining(c))


NORMALIZERS: Dict[str, Normalizer] = {
    "exact": exact,
    "casefold": casefold,
    "accent-insensitive": accent_insensitive,
}


def get_normalizer(name: str) -> Normalizer:
    """Look up a normalizer by its configuration name."""
    try:
        return NORMALIZERS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown profession match mode '{name}'. "
            f"Use one of: {', '.join(sorted(NORMALIZERS))}"
        ) from None
