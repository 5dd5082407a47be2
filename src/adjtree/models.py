"""Records of a hierarchical entity and of traversal results."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from adjtree.common.exceptions import MissingDepthOrPathMetadataError
from adjtree.common.schema import HierarchySchema


@dataclass
class Node:
    """One row of a hierarchical table plus any relations loaded onto it."""

    attributes: dict[str, Any] = field(default_factory=dict)
    relations: dict[str, list[TraversalRow]] = field(default_factory=dict)

    def __getitem__(self, column: str) -> Any:
        return self.attributes[column]

    def get(self, column: str, default: Any = None) -> Any:
        return self.attributes.get(column, default)

    def set_relation(self, name: str, rows: list[TraversalRow]) -> None:
        self.relations[name] = rows


@dataclass
class TraversalRow(Node):
    """A node reached by a recursive traversal.

    Attributes:
        depth: Signed distance from the origin (0 = origin, -1 = parent, ...).
        path: Keys from the anchor row to this row, in traversal order.
        link_key: Key of the directly linked row this row was reached from.
    """

    depth: int = 0
    path: tuple[Any, ...] = ()
    link_key: Any = None

    @property
    def first_path_segment(self) -> Any:
        """Key of the anchor row this row descends from."""
        if not self.path:
            raise MissingDepthOrPathMetadataError(
                f"row {self.attributes!r} has an empty path"
            )
        return self.path[0]

    @classmethod
    def from_record(
        cls, record: Mapping[str, Any], schema: HierarchySchema
    ) -> TraversalRow:
        """Hydrate a result record, splitting off the traversal metadata columns.

        Raises:
            MissingDepthOrPathMetadataError: If depth, path or link columns are
                missing or null, or path is not a sequence.
        """
        meta = (schema.depth_column, schema.path_column, schema.link_column)
        missing = [c for c in meta if record.get(c) is None]
        if missing:
            raise MissingDepthOrPathMetadataError(
                f"columns {missing} missing from result record {dict(record)!r}"
            )

        path = record[schema.path_column]
        if isinstance(path, (str, bytes)) or not isinstance(path, Sequence):
            raise MissingDepthOrPathMetadataError(
                f"path column '{schema.path_column}' is not an array: {path!r}"
            )

        return cls(
            attributes={k: v for k, v in record.items() if k not in meta},
            depth=int(record[schema.depth_column]),
            path=tuple(path),
            link_key=record[schema.link_column],
        )
