"""Recursive relations over hierarchical tables."""

from adjtree.relations.ancestors import Ancestors
from adjtree.relations.base import RecursiveRelation
from adjtree.relations.mode import TraversalMode

__all__ = ["Ancestors", "RecursiveRelation", "TraversalMode"]
