"""Traversal mode of a recursive relation."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from adjtree.models import TraversalRow
from adjtree.relations.dictionary import (
    build_first_level_dictionary,
    build_path_dictionary,
)
from adjtree.renderer.dialect import UnionStrategy


class TraversalMode(Enum):
    """Whether the origins themselves are part of the result.

    Fixed when the relation is defined; it decides the anchor column, the
    initial depth, the union strategy of batched plans and the dictionary
    algorithm.
    """

    INCLUDE_SELF = "include_self"
    EXCLUDE_SELF = "exclude_self"

    @classmethod
    def from_flag(cls, and_self: bool) -> TraversalMode:
        return cls.INCLUDE_SELF if and_self else cls.EXCLUDE_SELF

    @property
    def initial_depth(self) -> int:
        return 0 if self is TraversalMode.INCLUDE_SELF else -1

    @property
    def batch_union(self) -> UnionStrategy:
        # Origins sharing an ancestor must not double the shared rows
        if self is TraversalMode.INCLUDE_SELF:
            return UnionStrategy.UNION_ALL
        return UnionStrategy.UNION

    def build_dictionary(
        self, results: Sequence[TraversalRow], key_column: str
    ) -> dict[Any, list[TraversalRow]]:
        if self is TraversalMode.INCLUDE_SELF:
            return build_path_dictionary(results)
        return build_first_level_dictionary(results, key_column)
