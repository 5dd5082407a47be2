"""adjtree - Ancestor traversal for adjacency-list tables as recursive SQL."""

from adjtree.common.schema import EntityProperty, HierarchySchema
from adjtree.context import HierarchyContext
from adjtree.models import Node, TraversalRow
from adjtree.query.recursive import HierarchyQuery
from adjtree.relations.ancestors import Ancestors

__version__ = "0.1.0"
__all__ = [
    "Ancestors",
    "EntityProperty",
    "HierarchyContext",
    "HierarchyQuery",
    "HierarchySchema",
    "Node",
    "TraversalRow",
    "__version__",
]
