"""
Unit tests for short name generation and private name scopes.
"""
import pytest

from hashmangle.transforms.naming import ShortNameGenerator, generate_short_name
from hashmangle.transforms.scope import ScopeResolver


# ─── Short Names ─────────────────────────────────────────────────────────────

class TestGenerateShortName:
    @pytest.mark.parametrize("index,name", [
        (0, "$a"),
        (25, "$z"),
        (26, "$A"),
        (51, "$Z"),
        (52, "$aa"),
        (53, "$ab"),
        (104, "$ba"),
        (2755, "$ZZ"),
        (2756, "$aaa"),
    ])
    def test_sequence(self, index, name):
        assert generate_short_name(index) == name

    def test_no_repeats(self):
        names = [generate_short_name(i) for i in range(10000)]
        assert len(set(names)) == len(names)

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            generate_short_name(-1)


class TestShortNameGenerator:
    def test_counter_advances(self):
        names = ShortNameGenerator()
        assert [names.next_name() for _ in range(3)] == ["$a", "$b", "$c"]
        assert names.count == 3

    def test_generators_are_independent(self):
        first, second = ShortNameGenerator(), ShortNameGenerator()
        first.next_name()
        assert second.next_name() == "$a"


# ─── Scopes ──────────────────────────────────────────────────────────────────

class TestScopeResolver:
    def test_repeated_member_names_share_a_slot(self):
        scopes = ScopeResolver(ShortNameGenerator())
        scope = scopes.enter_class(["#val", "#_val", "#val"])
        assert scope == {"#val": "$a", "#_val": "$b"}

    def test_innermost_scope_wins(self):
        scopes = ScopeResolver(ShortNameGenerator())
        scopes.enter_class(["#x", "#y"])
        scopes.enter_class(["#x"])
        assert scopes.resolve("#x") == "$c"
        assert scopes.resolve("#y") == "$b"
        scopes.exit_class()
        assert scopes.resolve("#x") == "$a"

    def test_unresolved_name(self):
        scopes = ScopeResolver(ShortNameGenerator())
        assert scopes.resolve("#x") is None
        scopes.enter_class([])
        assert scopes.resolve("#x") is None

    def test_exit_discards_scope(self):
        scopes = ScopeResolver(ShortNameGenerator())
        scopes.enter_class(["#x"])
        assert scopes.depth == 1
        scopes.exit_class()
        assert scopes.depth == 0
        assert scopes.resolve("#x") is None

    def test_names_never_reused_across_classes(self):
        names = ShortNameGenerator()
        scopes = ScopeResolver(names)
        scopes.enter_class(["#x"])
        scopes.exit_class()
        assert scopes.enter_class(["#x"]) == {"#x": "$b"}
