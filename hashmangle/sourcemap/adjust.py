"""
HashMangle — Source Map Adjustment
===================================
Each edit replaced a span [start, end) of the generated code with new
text, shifting every later column on the same line. This rewrites the
generated columns of a source map so they still point at the right
original positions after the edits are applied.

Edits never span lines (they replace single tokens), so only columns
move; generated line numbers are unchanged.
"""

import bisect
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from hashmangle.models import TextEdit
from hashmangle.sourcemap.model import Mapping, SourceMap
from hashmangle.transforms.edits import sort_edits

logger = logging.getLogger(__name__)


class LineIndex:
    """Start offset of every line in a text, for offset → (line, column) lookup."""

    def __init__(self, text: str):
        self.line_starts: List[int] = [0]
        pos = text.find("\n")
        while pos != -1:
            self.line_starts.append(pos + 1)
            pos = text.find("\n", pos + 1)

    def position(self, offset: int) -> Tuple[int, int]:
        """0-based (line, column) of `offset`."""
        line = bisect.bisect_right(self.line_starts, offset) - 1
        return line, offset - self.line_starts[line]


@dataclass(frozen=True)
class LineEditShift:
    column: int
    original_length: int
    new_length: int


def utf16_length(text: str) -> int:
    """Length of `text` in UTF-16 code units, the unit of source map columns."""
    if text.isascii():
        return len(text)
    return len(text.encode("utf-16-le")) // 2


def edits_by_line(text: str, edits: Iterable[TextEdit]) -> Dict[int, List[LineEditShift]]:
    """
    Group edits by 0-based generated line, ascending by column.

    Edit offsets index the Python string; columns and lengths are converted
    to UTF-16 code units, which differ after any astral character.
    """
    index = LineIndex(text)
    by_line: Dict[int, List[LineEditShift]] = {}
    # Running (offset, UTF-16 column) on the current line keeps this linear
    current_line, last_offset, last_column = -1, 0, 0
    for edit in sort_edits(edits):
        line, _ = index.position(edit.start)
        if line != current_line:
            current_line, last_offset, last_column = line, index.line_starts[line], 0
        last_column += utf16_length(text[last_offset:edit.start])
        last_offset = edit.start
        by_line.setdefault(line, []).append(LineEditShift(
            column=last_column,
            original_length=utf16_length(text[edit.start:edit.end]),
            new_length=utf16_length(edit.new_text),
        ))
    return by_line


def adjust_column(column: int, line_edits: Optional[Sequence[LineEditShift]]) -> int:
    if not line_edits:
        return column
    shift = 0
    for edit in line_edits:
        if edit.column + edit.original_length <= column:
            shift += edit.new_length - edit.original_length
        elif edit.column < column:
            # Inside a replaced span: snap to the start of the replacement
            return edit.column + shift
        else:
            break
    return column + shift


def adjust_source_map(source_map: SourceMap, original_code: str, edits: Sequence[TextEdit]) -> SourceMap:
    """
    Return a source map whose generated columns match the edited code.

    Args:
        source_map: Map for `original_code`
        original_code: Generated code before the edits were applied
        edits: Edits applied to `original_code`

    Unmapped segments (no source or original position) are dropped. With no
    edits the input map is returned as is.
    """
    if not edits:
        return source_map

    shifts = edits_by_line(original_code, edits)
    adjusted: List[Mapping] = []
    dropped = 0
    for mapping in source_map.mappings:
        if not mapping.is_mapped:
            dropped += 1
            continue
        column = adjust_column(mapping.generated_column, shifts.get(mapping.generated_line - 1))
        adjusted.append(replace(mapping, generated_column=column))

    if dropped:
        logger.debug(f"[SourceMap] Dropped {dropped} unmapped segments")

    return SourceMap(
        mappings=adjusted,
        sources=list(source_map.sources),
        sources_content=list(source_map.sources_content),
        names=list(source_map.names),
        file=source_map.file,
        source_root=source_map.source_root,
        version=source_map.version,
    )


def adjust_raw_source_map(raw: Dict[str, Any], original_code: str, edits: Sequence[TextEdit]) -> Dict[str, Any]:
    """adjust_source_map for source maps held as parsed JSON objects."""
    if not edits:
        return raw
    return adjust_source_map(SourceMap.from_dict(raw), original_code, edits).to_dict()
