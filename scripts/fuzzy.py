"""Match full field names against loosely named input keys.

Producers such as XFA-converted forms give fields names like
``topmostSubform[0].Page1[0].f1_01[0]``; callers usually only know ``f1_01``.
A field name is tried as-is, then alternately with its ``[n]`` indexes
stripped and with its outermost segment dropped, until a key matches or no
segment is left.
"""

import re

INDEX_PATTERN = re.compile(r"\[\d+\]")


def strip_indexes(name):
    return INDEX_PATTERN.sub("", name)


def drop_outermost(name):
    """Drop the leading dot-separated segment ("" if it was the only one)."""
    _, sep, rest = name.partition(".")
    return rest if sep else ""


def candidates(name):
    """Yield the names tried for `name`, in order."""
    yield name
    candidate = name
    while candidate:
        candidate = strip_indexes(candidate)
        yield candidate
        candidate = drop_outermost(candidate)
        yield candidate


def match_key(name, values):
    """Return the key of `values` matching field `name`, or None."""
    for candidate in candidates(name):
        if candidate and candidate in values:
            return candidate
    return None
