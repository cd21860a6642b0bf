"""
Query Hasher

Normalizes rule query expressions so that renderings of the same query by
different rule sources compare equal.
"""

import re

_WHITESPACE = re.compile(r"\s")


def hash_query(query: str) -> str:
    """
    Fingerprint a query expression, insensitive to whitespace, one layer of
    wrapping parentheses and the order of label matchers.

    This compares character multisets, so distinct queries built from the same
    characters collide. Such collisions are accepted as false-positive matches.

    Args:
        query: Raw query text

    Returns:
        str: Sorted characters of the normalized query
    """
    if len(query) > 1 and query[0] == "(" and query[-1] == ")":
        query = query[1:-1]

    query = _WHITESPACE.sub("", query)

    return "".join(sorted(query))
