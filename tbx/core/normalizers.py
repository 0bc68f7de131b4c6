# tbx/core/normalizers.py

"""
Account name normalization.

Every name comparison in the system (renumber detection, memory lookup,
fuzzy memory match, keyword containment) runs on the output of
normalize_name. Never compare raw display names.
"""

# Characters dropped from names before comparison, spaces included
_STRIPPED_CHARS = '-_/().,"' + " "
_STRIP_TABLE = str.maketrans("", "", _STRIPPED_CHARS)


def normalize_name(name: str | None) -> str:
    """
    Normalize an account display name into a comparison key.

    - Lowercase
    - Remove - _ / ( ) . , " and spaces

    Empty or whitespace-only input yields "".
    """
    if not name or not name.strip():
        return ""

    return name.lower().translate(_STRIP_TABLE)
