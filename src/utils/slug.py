"""Slug generation."""

import re
import unicodedata

_NON_WORD = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Turn a display name into a lowercase, hyphen-separated slug.

    Example:
        >>> slugify("Senior Editor")
        'senior-editor'
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_WORD.sub("-", normalized.lower()).strip("-")
