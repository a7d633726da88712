"""Dependency name matching for ignored_updates / automerged_updates."""

from collections.abc import Collection


def matches(name: str, patterns: Collection[str]) -> bool:
    """True if name equals a pattern, or starts with the prefix of a pattern ending in `*`."""
    if name in patterns:
        return True
    return any(name.startswith(p[:-1]) for p in patterns if p.endswith("*"))
