"""Regroup flattened traversal rows by the origin they belong to.

A batched traversal runs one recursive query for many origins.  The rows come
back flattened; these builders map each origin key to its own rows, keeping
the flattened result order inside every list.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from typing import Any

from adjtree.common.exceptions import MissingDepthOrPathMetadataError
from adjtree.models import TraversalRow

FIRST_LEVEL_DEPTH = -1


def build_path_dictionary(
    results: Sequence[TraversalRow],
) -> dict[Any, list[TraversalRow]]:
    """Group rows by the first key of their path.

    Used when origins are part of the result: every path starts at its
    origin, so the first segment is the grouping key.
    """
    dictionary: dict[Any, list[TraversalRow]] = {}
    for row in results:
        _require_metadata(row)
        dictionary.setdefault(row.first_path_segment, []).append(row)
    return dictionary


def build_first_level_dictionary(
    results: Sequence[TraversalRow], key_column: str
) -> dict[Any, list[TraversalRow]]:
    """Group rows of a traversal that excludes the origins.

    Rows at depth -1 were linked to their origin directly and carry its key
    as ``link_key``.  Deeper rows are produced once even when several origins
    share them, so they are filed under the origin of every first-level row
    their path starts from.

    Args:
        results: Flattened rows of one traversal.
        key_column: Key column of the hierarchical table.

    Raises:
        MissingDepthOrPathMetadataError: If a row lacks traversal metadata or
            an indirect row has no first-level row to attribute it through.
    """
    first_level: defaultdict[Any, list[TraversalRow]] = defaultdict(list)
    for row in results:
        _require_metadata(row)
        if row.depth == FIRST_LEVEL_DEPTH:
            first_level[_node_key(row, key_column)].append(row)

    dictionary: dict[Any, list[TraversalRow]] = {}
    for row in results:
        if row.depth < FIRST_LEVEL_DEPTH:
            linked = first_level.get(row.first_path_segment)
            if not linked:
                raise MissingDepthOrPathMetadataError(
                    f"no first-level row for path segment {row.first_path_segment!r} "
                    f"(row at depth {row.depth})"
                )
            keys = [model.link_key for model in linked]
        else:
            keys = [row.link_key]

        for key in keys:
            dictionary.setdefault(key, []).append(row)
    return dictionary


def _node_key(row: TraversalRow, key_column: str) -> Any:
    try:
        return row[key_column]
    except KeyError:
        raise MissingDepthOrPathMetadataError(
            f"key column '{key_column}' missing from row {row.attributes!r}"
        ) from None


def _require_metadata(row: Any) -> None:
    if not isinstance(row, TraversalRow):
        raise MissingDepthOrPathMetadataError(
            f"expected a traversal row, got {type(row).__name__}"
        )
    if not row.path or row.link_key is None:
        raise MissingDepthOrPathMetadataError(
            f"row {row.attributes!r} has no path or link key"
        )
