"""
HashMangle — Short Name Generator
==================================
Produces `$a, $b, ..., $z, $A, ..., $Z, $aa, $ab, ...` using a bijective
base-52 numbering, so no two indices ever map to the same name.

The `$` prefix keeps replacement names out of the way of ordinary
identifiers in bundled output. Bundles that themselves emit `$`-prefixed
short property names are not protected by this.
"""

NAME_PREFIX = "$"
CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_short_name(index: int) -> str:
    if index < 0:
        raise ValueError(f"Name index must be non-negative, got {index}")
    name = ""
    while True:
        name = CHARS[index % len(CHARS)] + name
        index = index // len(CHARS) - 1
        if index < 0:
            break
    return NAME_PREFIX + name


class ShortNameGenerator:
    """Invocation-scoped name source. Each call to next_name() advances the counter."""

    def __init__(self):
        self._counter = 0

    @property
    def count(self) -> int:
        """Number of names handed out so far."""
        return self._counter

    def next_name(self) -> str:
        name = generate_short_name(self._counter)
        self._counter += 1
        return name
