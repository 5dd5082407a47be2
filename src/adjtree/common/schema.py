"""Hierarchy schema definitions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class EntityProperty:
    """Represents a column of a hierarchical entity."""

    property_name: str
    data_type: type[Any]  # Python type equivalent

    def __post_init__(self) -> None:
        """Validate the property after initialization."""
        if not self.property_name:
            raise ValueError("Property name cannot be empty")


@dataclass
class HierarchySchema:
    """Schema definition for a self-referencing (adjacency list) table.

    Every row carries ``parent_key_property`` pointing at the
    ``key_property`` of its parent row (NULL at the root). The traversal
    metadata columns (``depth_column``, ``path_column``, ``link_column``)
    are added by the recursive expression and must not clash with real
    columns of the table.
    """

    name: str
    table_name: str = ""
    key_property: EntityProperty = field(
        default_factory=lambda: EntityProperty("id", int)
    )
    parent_key_property: EntityProperty = field(
        default_factory=lambda: EntityProperty("parent_id", int)
    )
    properties: list[EntityProperty] = field(default_factory=list)
    depth_column: str = "depth"
    path_column: str = "path"
    link_column: str = "link_key"
    max_depth: int | None = None

    def __post_init__(self) -> None:
        if not self.table_name:
            self.table_name = self.name
        reserved = {self.depth_column, self.path_column, self.link_column}
        clashing = reserved.intersection(self.column_names)
        if clashing:
            raise ValueError(
                f"Columns {sorted(clashing)} of '{self.name}' clash with "
                "traversal metadata columns"
            )
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError("max_depth must be a positive integer")

    @property
    def key_column(self) -> str:
        return self.key_property.property_name

    @property
    def parent_key_column(self) -> str:
        return self.parent_key_property.property_name

    @property
    def column_names(self) -> list[str]:
        """Key, parent key and property columns, in that order, without duplicates."""
        names = [self.key_column, self.parent_key_column]
        for prop in self.properties:
            if prop.property_name not in names:
                names.append(prop.property_name)
        return names


class IHierarchySchemaProvider(ABC):
    """Interface for providing hierarchy schema definitions."""

    @abstractmethod
    def get_hierarchy_definition(self, name: str) -> HierarchySchema | None:
        """
        Return a HierarchySchema for the given name.

        Args:
            name: The name of the hierarchical entity.

        Returns:
            HierarchySchema if found, None otherwise.
        """
        ...

    @abstractmethod
    def hierarchy_names(self) -> list[str]:
        """Return the names of all registered hierarchies."""
        ...


class SimpleHierarchySchemaProvider(IHierarchySchemaProvider):
    """A simple in-memory hierarchy schema provider."""

    def __init__(self) -> None:
        self._hierarchies: dict[str, HierarchySchema] = {}

    def add_hierarchy(self, schema: HierarchySchema) -> None:
        """Add a hierarchy schema to the provider."""
        self._hierarchies[schema.name] = schema

    def get_hierarchy_definition(self, name: str) -> HierarchySchema | None:
        """Get a hierarchy schema by name."""
        return self._hierarchies.get(name)

    def hierarchy_names(self) -> list[str]:
        return list(self._hierarchies)
