"""
HashMangle — Shared Models
===========================
Dataclasses and enums shared across the rewrite pass, the source map
adjuster, telemetry and the CLI.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class TransformType(str, Enum):
    PRIVATE_TO_PROPERTY = "private_to_property"


class ScriptLanguage(str, Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    TSX = "tsx"


@dataclass(frozen=True)
class TextEdit:
    """A single replacement of the span [start, end) in the original text."""
    start: int
    end: int
    new_text: str

    @property
    def original_length(self) -> int:
        return self.end - self.start


@dataclass
class ConversionResult:
    """Outcome of one private-to-property pass over a single script."""
    code: str
    class_count: int = 0
    field_count: int = 0
    edit_count: int = 0
    elapsed_ms: float = 0.0

    # Sorted edits applied to the original code, kept for source map adjustment
    edits: Tuple[TextEdit, ...] = field(default_factory=tuple)
