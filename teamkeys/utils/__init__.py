"""Utility functions."""

import re

from teamkeys.utils.fingerprint import Fingerprint

NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]+")

# Characters spelled out rather than dropped
SLUG_SUBSTITUTIONS = {"&": "and", "@": "a"}


def slugify(name: str) -> str:
    """Convert a team name to a filename-safe slug.

    Only ASCII letters and digits survive. ``&`` becomes ``and`` (and ``@``
    becomes ``a``), every other run of characters (punctuation, whitespace,
    accented letters, emoji) becomes a single hyphen, and hyphens are trimmed
    from both ends. The result can be empty.

    Args:
        name: The name to slugify.

    Returns:
        Lowercase slug, e.g. ``"Marks & Spencers"`` -> ``"marks-and-spencers"``.
    """
    slug = name
    for char, replacement in SLUG_SUBSTITUTIONS.items():
        slug = slug.replace(char, replacement)
    # Filter before lowercasing, which can turn some non-ASCII letters into ASCII
    slug = NON_ALPHANUMERIC.sub("-", slug)
    return slug.strip("-").lower()


__all__ = ["Fingerprint", "slugify"]
