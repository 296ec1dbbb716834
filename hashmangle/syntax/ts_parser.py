"""
HashMangle — tree-sitter Parser Adapter
========================================
Parses JavaScript / TypeScript text with tree-sitter and exposes the tree
through the SyntaxNode interface consumed by the rewrite pass.

tree-sitter reports UTF-8 byte offsets. The rewrite pass slices Python
strings, so every offset handed out here is converted to a string index.
"""

import bisect
import importlib
import logging
import re
from functools import lru_cache
from pathlib import PurePath
from typing import List, Optional, Sequence

from tree_sitter import Language, Node, Parser

from hashmangle.models import ScriptLanguage
from hashmangle.syntax.nodes import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

# Language -> (module_name, language_getter)
LANGUAGE_CONFIG = {
    ScriptLanguage.JAVASCRIPT: ("tree_sitter_javascript", "language"),
    ScriptLanguage.TYPESCRIPT: ("tree_sitter_typescript", "language_typescript"),
    ScriptLanguage.TSX: ("tree_sitter_typescript", "language_tsx"),
}

EXT_TO_LANGUAGE = {
    ".js": ScriptLanguage.JAVASCRIPT,
    ".mjs": ScriptLanguage.JAVASCRIPT,
    ".cjs": ScriptLanguage.JAVASCRIPT,
    ".jsx": ScriptLanguage.JAVASCRIPT,
    ".ts": ScriptLanguage.TYPESCRIPT,
    ".mts": ScriptLanguage.TYPESCRIPT,
    ".cts": ScriptLanguage.TYPESCRIPT,
    ".tsx": ScriptLanguage.TSX,
}

CLASS_NODE_TYPES = {"class_declaration", "abstract_class_declaration", "class"}
MEMBER_NODE_TYPES = {
    "field_definition",
    "public_field_definition",
    "method_definition",
    "method_signature",
    "abstract_method_signature",
}
PRIVATE_NAME_NODE_TYPE = "private_property_identifier"

_NON_ASCII = re.compile(r"[^\x00-\x7f]")


class ScriptSyntaxError(Exception):
    """Raised in strict mode when the parsed script contains syntax errors."""

    def __init__(self, filename: str, line: int, column: int):
        super().__init__(f"{filename}:{line}:{column}: syntax error")
        self.filename = filename
        self.line = line
        self.column = column


def language_for_filename(filename: str, default: ScriptLanguage = ScriptLanguage.JAVASCRIPT) -> ScriptLanguage:
    """Pick a grammar from the file extension."""
    return EXT_TO_LANGUAGE.get(PurePath(filename).suffix.lower(), default)


@lru_cache(maxsize=None)
def _load_language(language: ScriptLanguage) -> Language:
    module_name, getter = LANGUAGE_CONFIG[language]
    module = importlib.import_module(module_name)
    return Language(getattr(module, getter)())


class _OffsetIndex:
    """Converts UTF-8 byte offsets to string indices."""

    def __init__(self, code: str, byte_length: int):
        self._ascii = byte_length == len(code)
        # Byte offset just past each multi-byte character, and the number of
        # extra bytes accumulated up to and including it.
        self._byte_ends: List[int] = []
        self._extra: List[int] = []
        if self._ascii:
            return
        extra = 0
        for match in _NON_ASCII.finditer(code):
            width = len(match.group().encode("utf-8"))
            byte_start = match.start() + extra
            extra += width - 1
            self._byte_ends.append(byte_start + width)
            self._extra.append(extra)

    def to_index(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        i = bisect.bisect_right(self._byte_ends, byte_offset)
        return byte_offset - (self._extra[i - 1] if i else 0)


class _ParsedSource:
    __slots__ = ("code", "offsets")

    def __init__(self, code: str, offsets: _OffsetIndex):
        self.code = code
        self.offsets = offsets


class TreeSitterNode(SyntaxNode):
    """SyntaxNode view over a tree-sitter node."""

    __slots__ = ("_node", "_source", "_kind")

    def __init__(self, node: Node, source: _ParsedSource):
        self._node = node
        self._source = source
        self._kind: Optional[NodeKind] = None

    @property
    def kind(self) -> NodeKind:
        if self._kind is None:
            self._kind = self._classify()
        return self._kind

    @property
    def start(self) -> int:
        return self._source.offsets.to_index(self._node.start_byte)

    @property
    def end(self) -> int:
        return self._source.offsets.to_index(self._node.end_byte)

    @property
    def text(self) -> str:
        return self._source.code[self.start:self.end]

    def children(self) -> Sequence[SyntaxNode]:
        return [TreeSitterNode(c, self._source) for c in self._node.named_children]

    def child(self, field_name: str) -> Optional[SyntaxNode]:
        found = self._node.child_by_field_name(field_name)
        if found is None and field_name == "name":
            # JavaScript field definitions name their key `property`
            found = self._node.child_by_field_name("property")
        return TreeSitterNode(found, self._source) if found is not None else None

    def _classify(self) -> NodeKind:
        node_type = self._node.type
        if node_type in CLASS_NODE_TYPES:
            return NodeKind.CLASS
        if node_type in MEMBER_NODE_TYPES:
            return NodeKind.MEMBER
        if node_type == PRIVATE_NAME_NODE_TYPE:
            return NodeKind.PRIVATE_NAME
        if node_type == "binary_expression":
            operator = self._node.child_by_field_name("operator")
            left = self._node.child_by_field_name("left")
            if (operator is not None and operator.type == "in"
                    and left is not None and left.type == PRIVATE_NAME_NODE_TYPE):
                return NodeKind.BRAND_CHECK
        return NodeKind.OTHER


def _first_error(node: Node) -> Optional[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_error or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def parse_script(
    code: str,
    filename: str,
    language: ScriptLanguage = ScriptLanguage.JAVASCRIPT,
    strict: bool = False,
) -> TreeSitterNode:
    """
    Parse script text and return the root node.

    tree-sitter recovers from syntax errors; by default they are logged and
    the recovered tree is returned. With strict=True a ScriptSyntaxError is
    raised instead. `filename` is only used for diagnostics.
    """
    data = code.encode("utf-8")
    parser = Parser(_load_language(language))
    tree = parser.parse(data)
    root = tree.root_node

    if root.has_error:
        error = _first_error(root)
        line, column = (error.start_point[0] + 1, error.start_point[1]) if error is not None else (1, 0)
        if strict:
            raise ScriptSyntaxError(filename, line, column)
        logger.warning(f"[Parser] {filename}:{line}:{column}: syntax error, continuing with recovered tree; "
                       "private names inside the error are left unchanged")

    return TreeSitterNode(root, _ParsedSource(code, _OffsetIndex(code, len(data))))
