"""Render context: alias bookkeeping shared by a compound query.

A ``RenderContext`` is created by the outermost ``QueryBuilder`` and handed
to every sub-query composed into it (existence checks, recursive
expressions).  It owns the reserved-alias counter, so two existence checks
against the same table embedded in one statement never get the same alias.
"""

from __future__ import annotations

from adjtree.common.exceptions import AliasCollisionError


class RenderContext:
    """Shared alias state for one compound query."""

    RESERVED_ALIAS_PREFIX = "adjtree_reserved_"

    def __init__(self) -> None:
        self._alias_counter = 0
        self._claimed: set[str] = set()

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    def next_reserved_alias(self) -> str:
        """Return a fresh ``adjtree_reserved_N`` alias, claim it and advance."""
        alias = self.current_reserved_alias()
        self._alias_counter += 1
        self.claim(alias)
        return alias

    def current_reserved_alias(self) -> str:
        """Return the alias the next call to ``next_reserved_alias`` will hand out."""
        return f"{self.RESERVED_ALIAS_PREFIX}{self._alias_counter}"

    @property
    def alias_counter(self) -> int:
        return self._alias_counter

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    def claim(self, identifier: str) -> None:
        """Register *identifier* as used in this query.

        Raises:
            AliasCollisionError: If the identifier is already claimed.
        """
        if identifier in self._claimed:
            raise AliasCollisionError(
                f"'{identifier}' is already used in this query"
            )
        self._claimed.add(identifier)

    def is_claimed(self, identifier: str) -> bool:
        return identifier in self._claimed

    @staticmethod
    def indent(depth: int) -> str:
        """Return indentation string for *depth* nesting levels."""
        return "  " * depth
