"""
HashMangle — Private Name Scopes
=================================
Private names are lexically confined to their declaring class body, so a
stack of per-class tables is all the resolution state the pass needs.
Lookup runs innermost to outermost, matching JavaScript's own resolution.
"""

from typing import Dict, Iterable, List, Optional

from hashmangle.transforms.naming import ShortNameGenerator

# Private name (with its `#`) -> replacement name, for one class
ClassScope = Dict[str, str]


class ScopeResolver:

    def __init__(self, names: ShortNameGenerator):
        self._names = names
        self._stack: List[ClassScope] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    def enter_class(self, member_names: Iterable[str]) -> ClassScope:
        """
        Push a scope for a class whose direct private members are `member_names`.
        A getter/setter pair or a repeated declaration shares one replacement.
        """
        scope: ClassScope = {}
        for name in member_names:
            if name not in scope:
                scope[name] = self._names.next_name()
        self._stack.append(scope)
        return scope

    def exit_class(self) -> ClassScope:
        return self._stack.pop()

    def resolve(self, name: str) -> Optional[str]:
        for scope in reversed(self._stack):
            replacement = scope.get(name)
            if replacement is not None:
                return replacement
        return None
