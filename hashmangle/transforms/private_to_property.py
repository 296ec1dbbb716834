"""
HashMangle Transform — Private Fields to Properties
====================================================
Converts native ES private members (`#foo`) into regular properties with
short, globally unique names (`$a`, `$b`, ...). Native private fields are
slower than plain properties in V8, and short names shrink the bundle.

Simply stripping `#` is not enough:
- `class B extends A` where both declare `#x` would collide on `x`.
- `static #name` on a subclass of Error would shadow `Error.name`.

Each (class, private name) pair therefore gets its own name from one
counter. Private names are lexically scoped to their declaring class body,
so every declaration and usage is found by a single syntax-only walk.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from hashmangle.models import ConversionResult, ScriptLanguage, TextEdit, TransformType
from hashmangle.syntax.nodes import NodeKind, SyntaxNode
from hashmangle.syntax.ts_parser import parse_script
from hashmangle.transforms.base import BaseTransformer, register_transform
from hashmangle.transforms.edits import apply_edits, sort_edits
from hashmangle.transforms.naming import ShortNameGenerator
from hashmangle.transforms.scope import ScopeResolver

logger = logging.getLogger(__name__)

PRIVATE_SIGIL = "#"

# Marks the point in the walk where a class body has been fully processed
_EXIT_CLASS = object()


class PrivateNameWalker:
    """
    Depth-first walk over a syntax tree collecting private-name edits.

    Class scopes are pushed on entry, populated from the class's own
    members before its body is walked, and popped once the body (and any
    nested classes) is done. Occurrences that resolve against no enclosing
    class are left untouched.
    """

    def __init__(self, names: Optional[ShortNameGenerator] = None):
        self.names = names or ShortNameGenerator()
        self.scopes = ScopeResolver(self.names)
        self.edits: List[TextEdit] = []
        self.class_count = 0

    def run(self, root: SyntaxNode) -> List[TextEdit]:
        # Explicit stack: bundled output nests deeper than the recursion limit.
        stack: List[Any] = [root]
        while stack:
            node = stack.pop()
            if node is _EXIT_CLASS:
                self.scopes.exit_class()
                continue

            kind = node.kind
            if kind is NodeKind.CLASS:
                self._enter_class(node)
                stack.append(_EXIT_CLASS)
                stack.extend(reversed(node.children()))
            elif kind is NodeKind.BRAND_CHECK:
                # `#x in obj` tests for an ordinary property after renaming,
                # so the left operand becomes a string key.
                left = node.child("left")
                if left is not None:
                    self._replace(left, quoted=True)
                right = node.child("right")
                if right is not None:
                    stack.append(right)
            elif kind is NodeKind.PRIVATE_NAME:
                self._replace(node, quoted=False)
            else:
                stack.extend(reversed(node.children()))
        return self.edits

    def _enter_class(self, node: SyntaxNode) -> None:
        scope = self.scopes.enter_class(self._declared_names(node))
        if scope:
            self.class_count += 1

    @staticmethod
    def _declared_names(node: SyntaxNode) -> List[str]:
        body = node.child("body")
        if body is None:
            return []
        names = []
        for member in body.children():
            if member.kind is not NodeKind.MEMBER:
                continue
            name = member.child("name")
            if name is not None and name.kind is NodeKind.PRIVATE_NAME:
                names.append(name.text)
        return names

    def _replace(self, node: SyntaxNode, quoted: bool) -> None:
        resolved = self.scopes.resolve(node.text)
        if resolved is None:
            return
        new_text = f"'{resolved}'" if quoted else resolved
        self.edits.append(TextEdit(start=node.start, end=node.end, new_text=new_text))


def _elapsed_ms(t_start: float) -> float:
    return (time.time() - t_start) * 1000


def convert_private_fields(
    code: str,
    filename: str,
    language: ScriptLanguage = ScriptLanguage.JAVASCRIPT,
    strict: bool = False,
    tree: Optional[SyntaxNode] = None,
) -> ConversionResult:
    """
    Rename every native `#` private member in `code` to a short unique property.

    Args:
        code: Script text, typically a bundled output file
        filename: Used for parser diagnostics only
        language: Grammar used to parse `code`
        strict: Raise on syntax errors instead of walking the recovered tree
        tree: Pre-parsed tree over `code`; skips the built-in parser

    Returns:
        ConversionResult with the rewritten code, stats and sorted edits
    """
    t_start = time.time()

    # Quick bail-out: no sigil, nothing to rename
    if PRIVATE_SIGIL not in code:
        return ConversionResult(code=code, elapsed_ms=_elapsed_ms(t_start))

    root = tree if tree is not None else parse_script(code, filename, language=language, strict=strict)
    walker = PrivateNameWalker()
    edits = walker.run(root)

    if not edits:
        return ConversionResult(code=code, elapsed_ms=_elapsed_ms(t_start))

    ordered = tuple(sort_edits(edits))
    result = ConversionResult(
        code=apply_edits(code, ordered),
        class_count=walker.class_count,
        field_count=walker.names.count,
        edit_count=len(ordered),
        elapsed_ms=_elapsed_ms(t_start),
        edits=ordered,
    )
    logger.debug(
        f"[PrivateToProperty] {filename}: {result.class_count} classes, "
        f"{result.field_count} fields, {result.edit_count} edits in {result.elapsed_ms:.1f}ms"
    )
    return result


@register_transform
class PrivateToPropertyTransformer(BaseTransformer):
    """
    Rewrites `#private` members of every class to `$`-prefixed properties.
    Params: filename, language, strict.
    """
    name = TransformType.PRIVATE_TO_PROPERTY

    def apply(self, source_code: str, params: Dict[str, Any]) -> ConversionResult:
        return convert_private_fields(
            source_code,
            params.get("filename", "<input>"),
            language=ScriptLanguage(params.get("language", ScriptLanguage.JAVASCRIPT)),
            strict=params.get("strict", False),
        )

    def describe(self, params: Dict[str, Any]) -> str:
        filename = params.get("filename", "<input>")
        return f"Converted native private members to short unique properties in {filename}"
