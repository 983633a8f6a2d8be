"""Diacritic-insensitive text comparison used to map free text onto portal dropdowns."""
import unicodedata
from typing import Callable, Iterable, Optional, TypeVar

C = TypeVar("C")

EXACT_SCORE = 1.0
PARTIAL_SCORE = 0.8


def normalize(text: str | None) -> str:
    """Strip diacritics, upper-case and trim. None and blank become ""."""
    if not text or not text.strip():
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return stripped.upper().strip()


def score(a: str | None, b: str | None) -> float:
    """Coarse similarity: 1.0 equal, 0.8 containment either way, 0 otherwise."""
    na, nb = normalize(a), normalize(b)
    if not na or not nb:
        return 0.0
    if na == nb:
        return EXACT_SCORE
    if na in nb or nb in na:
        return PARTIAL_SCORE
    return 0.0


def best_match(
    query: str | None,
    candidates: Iterable[C],
    key: Callable[[C], str] = str,
    require_positive: bool = False,
) -> Optional[C]:
    """Return the highest-scoring candidate, first one wins on ties.

    Returns None for an empty candidate set, or when `require_positive` is set
    and nothing scored above zero.
    """
    best: Optional[C] = None
    best_score = -1.0
    for candidate in candidates:
        s = score(query, key(candidate))
        if s > best_score:
            best, best_score = candidate, s
    if best is None:
        return None
    if require_positive and best_score <= 0:
        return None
    return best
