"""
HashMangle — Syntax Node Interface
===================================
The rewrite pass never touches a concrete parser. It walks any tree whose
nodes expose this small capability surface: a normalized kind, a
[start, end) span in string offsets, the node's text, its children and a
handful of named fields.

Fields used by the walker:
  MEMBER       — "name": the member's declared name node (may be absent)
  BRAND_CHECK  — "left": the private name, "right": the tested expression
"""

from enum import Enum
from typing import Optional, Sequence


class NodeKind(str, Enum):
    CLASS = "class"                  # class declaration or class expression
    MEMBER = "member"                # field / method / accessor definition
    PRIVATE_NAME = "private_name"    # `#name`
    BRAND_CHECK = "brand_check"      # `#name in expr`
    OTHER = "other"


class SyntaxNode:
    """Base class for parser adapters handing trees to the rewrite pass."""

    @property
    def kind(self) -> NodeKind:
        raise NotImplementedError

    @property
    def start(self) -> int:
        raise NotImplementedError

    @property
    def end(self) -> int:
        raise NotImplementedError

    @property
    def text(self) -> str:
        raise NotImplementedError

    def children(self) -> Sequence["SyntaxNode"]:
        raise NotImplementedError

    def child(self, field_name: str) -> Optional["SyntaxNode"]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind.value} [{self.start}:{self.end}]>"
