"""
HashMangle — Edit Application
==============================
Applies a set of disjoint span replacements in one pass by concatenating
slices, so the cost is linear in the text plus the replacement text.
"""

from typing import Iterable, List

from hashmangle.models import TextEdit


def sort_edits(edits: Iterable[TextEdit]) -> List[TextEdit]:
    return sorted(edits, key=lambda e: e.start)


def apply_edits(text: str, edits: Iterable[TextEdit]) -> str:
    """
    Return `text` with every edit applied.

    Edits are given in original-text coordinates and may arrive in any order.
    Overlapping or out-of-range edits raise ValueError.
    """
    ordered = sort_edits(edits)
    if not ordered:
        return text

    parts: List[str] = []
    last_end = 0
    for edit in ordered:
        if edit.start < last_end:
            raise ValueError(f"Overlapping edit at {edit.start} (previous edit ends at {last_end})")
        if edit.end < edit.start or edit.end > len(text):
            raise ValueError(f"Edit span [{edit.start}, {edit.end}) is outside the text (length {len(text)})")
        parts.append(text[last_end:edit.start])
        parts.append(edit.new_text)
        last_end = edit.end
    parts.append(text[last_end:])
    return "".join(parts)
