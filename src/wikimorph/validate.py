"""
Plausibility checks for candidate breakdowns.

Template data on Wiktionary is free-form, so a breakdown is only accepted
when its pieces roughly spell the word they replace and none of them is that
word itself.
"""

import logging
from typing import Iterable, Sequence, TypeVar

from wikimorph.models import WordPiece


logger = logging.getLogger(__name__)

RECONSTRUCTION_THRESHOLD = 2

T = TypeVar("T")


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit-cost insertions, deletions and substitutions."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def reconstruct(pieces: Iterable[WordPiece]) -> str:
    """Concatenate piece texts with hyphens removed."""
    return "".join(p.bare() for p in pieces)


def reconstructs(
    original: str,
    pieces: Sequence[WordPiece],
    threshold: int = RECONSTRUCTION_THRESHOLD,
) -> bool:
    """Check that the pieces spell something close to the original word."""
    return levenshtein(original, reconstruct(pieces)) <= threshold


def non_explosive(original: str, pieces: Sequence[WordPiece]) -> bool:
    """Check that no piece is the original word itself."""
    return all(p.text != original for p in pieces)


def is_acceptable(original: str, pieces: Sequence[WordPiece]) -> bool:
    """Both checks; a rejected breakdown is discarded without a diagnostic."""
    if not pieces:
        return False
    if not reconstructs(original, pieces):
        logger.debug(
            f"Rejected {[p.text for p in pieces]} for '{original}': "
            f"'{reconstruct(pieces)}' is too far from the word"
        )
        return False
    if not non_explosive(original, pieces):
        logger.debug(f"Rejected {[p.text for p in pieces]} for '{original}': contains the word")
        return False
    return True


def unique_breakdowns(candidates: Iterable[T]) -> list[T]:
    """Deduplicate structurally equal breakdowns, keeping first occurrences."""
    seen = set()
    unique = []
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        unique.append(candidate)
    return unique
