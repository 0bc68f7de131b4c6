# tbx/core/similarity.py

"""
Name similarity scoring.

Two complementary scores, maximum wins:
- ratio:            character-level edit similarity
- token_sort_ratio: same ratio after sorting tokens, so reordered words
                    ("cash operating" vs "operating cash") still match

Inputs are expected to be already normalized with normalize_name.
"""

from rapidfuzz import fuzz


def similarity(a: str, b: str) -> float:
    """
    Similarity between two normalized names.
    Returns 0.0 to 1.0, symmetric, 1.0 for equal strings.
    """
    if a == b:
        return 1.0

    ratio = fuzz.ratio(a, b)
    token_sort = fuzz.token_sort_ratio(a, b)

    return max(ratio, token_sort) / 100.0
