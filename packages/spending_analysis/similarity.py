"""Bigram (Dice coefficient) string similarity.

Used by the categorization engine to compare a transaction description with
category names. Whitespace is ignored, so ``"whole foods"`` and
``"wholefoods"`` score 1.0. Callers are expected to lower-case both sides.
"""

from __future__ import annotations

from collections import Counter


def bigrams(text: str) -> Counter[str]:
    """Multiset of the contiguous two-character substrings of ``text``."""

    return Counter(text[i : i + 2] for i in range(len(text) - 1))


def compare_strings(first: str, second: str) -> float:
    """Return ``2 * |A ∩ B| / (|A| + |B|)`` over the bigram multisets.

    Strings shorter than two characters (after removing whitespace) score 1.0
    when equal and 0.0 otherwise.
    """

    a = "".join(first.split())
    b = "".join(second.split())
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0

    ba = bigrams(a)
    bb = bigrams(b)
    shared = sum((ba & bb).values())
    return 2.0 * shared / (len(a) - 1 + len(b) - 1)


__all__ = ["bigrams", "compare_strings"]
