"""
HashMangle — Source Map Model
==============================
In-memory form of a Source Map v3 document. Generated and original lines
are 1-based, columns 0-based, as in the `source-map` JavaScript library.
"""

import bisect
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hashmangle.sourcemap.vlq import SourceMapError, decode_segment, encode_segment


@dataclass(frozen=True)
class Mapping:
    """One mapping segment. Unmapped segments carry only a generated position."""
    generated_line: int
    generated_column: int
    source: Optional[str] = None
    original_line: Optional[int] = None
    original_column: Optional[int] = None
    name: Optional[str] = None

    @property
    def is_mapped(self) -> bool:
        return self.source is not None and self.original_line is not None and self.original_column is not None


@dataclass(frozen=True)
class OriginalPosition:
    source: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    name: Optional[str] = None


@dataclass
class SourceMap:
    mappings: List[Mapping] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)
    sources_content: List[Optional[str]] = field(default_factory=list)
    names: List[str] = field(default_factory=list)
    file: Optional[str] = None
    source_root: Optional[str] = None
    version: int = 3

    # ─── Reading ─────────────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SourceMap":
        version = raw.get("version", 3)
        if version != 3:
            raise SourceMapError(f"Unsupported source map version: {version}")
        if "sections" in raw:
            raise SourceMapError("Indexed source maps are not supported")

        sources = list(raw.get("sources") or [])
        names = list(raw.get("names") or [])
        content = list(raw.get("sourcesContent") or [])
        content += [None] * (len(sources) - len(content))

        return cls(
            mappings=_decode_mappings(raw.get("mappings", ""), sources, names),
            sources=sources,
            sources_content=content[:len(sources)],
            names=names,
            file=raw.get("file"),
            source_root=raw.get("sourceRoot"),
            version=version,
        )

    # ─── Writing ─────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        sources = list(self.sources)
        names = list(self.names)
        content = list(self.sources_content) + [None] * (len(self.sources) - len(self.sources_content))
        source_index = {s: i for i, s in enumerate(sources)}
        name_index = {n: i for i, n in enumerate(names)}
        for m in self.mappings:
            if m.source is not None and m.source not in source_index:
                source_index[m.source] = len(sources)
                sources.append(m.source)
                content.append(None)
            if m.name is not None and m.name not in name_index:
                name_index[m.name] = len(names)
                names.append(m.name)

        raw: Dict[str, Any] = {"version": self.version}
        if self.file is not None:
            raw["file"] = self.file
        if self.source_root is not None:
            raw["sourceRoot"] = self.source_root
        raw["sources"] = sources
        raw["names"] = names
        raw["mappings"] = _encode_mappings(self.mappings, source_index, name_index)
        if any(c is not None for c in content):
            raw["sourcesContent"] = content
        return raw

    # ─── Lookup ──────────────────────────────────────────────────────────────

    def original_position_for(self, line: int, column: int) -> OriginalPosition:
        """
        Original position of the mapping closest to (line, column) from the
        left on the same generated line.
        """
        on_line = sorted(
            (m for m in self.mappings if m.generated_line == line),
            key=lambda m: m.generated_column,
        )
        columns = [m.generated_column for m in on_line]
        i = bisect.bisect_right(columns, column)
        if i == 0:
            return OriginalPosition()
        m = on_line[i - 1]
        if not m.is_mapped:
            return OriginalPosition()
        return OriginalPosition(source=m.source, line=m.original_line, column=m.original_column, name=m.name)

    def source_content_for(self, source: str) -> Optional[str]:
        try:
            i = self.sources.index(source)
        except ValueError:
            return None
        return self.sources_content[i] if i < len(self.sources_content) else None


def _decode_mappings(encoded: str, sources: List[str], names: List[str]) -> List[Mapping]:
    mappings: List[Mapping] = []
    # Source, original line/column and name are deltas across the whole
    # document; the generated column resets on every line.
    source_i = original_line = original_column = name_i = 0
    for line_no, line in enumerate(encoded.split(";"), start=1):
        generated_column = 0
        for segment in line.split(","):
            if not segment:
                continue
            values = decode_segment(segment)
            if len(values) not in (1, 4, 5):
                raise SourceMapError(f"Invalid mapping segment {segment!r} on line {line_no}")
            generated_column += values[0]
            if len(values) == 1:
                mappings.append(Mapping(line_no, generated_column))
                continue

            source_i += values[1]
            original_line += values[2]
            original_column += values[3]
            name = None
            if len(values) == 5:
                name_i += values[4]
                if not 0 <= name_i < len(names):
                    raise SourceMapError(f"Name index {name_i} out of range on line {line_no}")
                name = names[name_i]
            if not 0 <= source_i < len(sources):
                raise SourceMapError(f"Source index {source_i} out of range on line {line_no}")
            mappings.append(Mapping(
                generated_line=line_no,
                generated_column=generated_column,
                source=sources[source_i],
                original_line=original_line + 1,
                original_column=original_column,
                name=name,
            ))
    return mappings


def _encode_mappings(
    mappings: List[Mapping],
    source_index: Dict[str, int],
    name_index: Dict[str, int],
) -> str:
    ordered = sorted(mappings, key=lambda m: (m.generated_line, m.generated_column))
    lines: List[str] = []
    segments: List[str] = []
    current_line = 1
    prev_column = prev_source = prev_original_line = prev_original_column = prev_name = 0

    for m in ordered:
        while current_line < m.generated_line:
            lines.append(",".join(segments))
            segments = []
            current_line += 1
            prev_column = 0

        values = [m.generated_column - prev_column]
        prev_column = m.generated_column
        if m.is_mapped:
            source = source_index[m.source]
            original_line = m.original_line - 1
            values += [
                source - prev_source,
                original_line - prev_original_line,
                m.original_column - prev_original_column,
            ]
            prev_source, prev_original_line, prev_original_column = source, original_line, m.original_column
            if m.name is not None:
                name = name_index[m.name]
                values.append(name - prev_name)
                prev_name = name
        segments.append(encode_segment(values))

    lines.append(",".join(segments))
    return ";".join(lines)
