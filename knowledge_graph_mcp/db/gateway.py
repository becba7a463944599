"""
Graph gateway contract for Knowledge Graph MCP.

The knowledge services never talk to a database directly; they go through a
GraphGateway, a generic entity/edge store scoped by workspace. This module
defines that contract and the additive schema merge every implementation
uses for ``upsert_schema``.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Iterable, List, Optional, TypeVar

from pydantic import BaseModel

from knowledge_graph_mcp.schema.entity_types import Entity, EntityAttrs, EntityType, SchemaDefinition
from knowledge_graph_mcp.schema.relationship_types import Edge, EdgeType

NEIGHBOR_DIRECTIONS = ("out", "in", "both")
MAX_TRAVERSAL_DEPTH = 10

T = TypeVar("T", bound=BaseModel)


def merge_types(existing: Iterable[T], incoming: Iterable[T]) -> List[T]:
    """
    Merge two lists of named schema types.

    The result is the union keyed by ``name``. Existing order is kept and new
    names are appended in incoming order; when both sides define the same
    name the incoming definition wins.

    Args:
        existing: Types currently stored
        incoming: Types being written

    Returns:
        Merged list of types
    """
    merged: Dict[str, T] = {}
    for schema_type in existing:
        merged[schema_type.name] = schema_type
    for schema_type in incoming:
        merged[schema_type.name] = schema_type
    return list(merged.values())


def validate_max_depth(max_depth: Any) -> int:
    """
    Check a traversal depth handed to a gateway.

    Raises:
        ValueError: If the depth is not an integer in 1..MAX_TRAVERSAL_DEPTH
    """
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise ValueError(f"max_depth must be an integer, got {max_depth!r}")
    if not 1 <= max_depth <= MAX_TRAVERSAL_DEPTH:
        raise ValueError(f"max_depth must be between 1 and {MAX_TRAVERSAL_DEPTH}, got {max_depth}")
    return max_depth


class GraphGateway(ABC):
    """
    Workspace-scoped entity/edge store.

    Lookups of missing records return None rather than raising; callers
    decide whether absence is an error.
    """

    @abstractmethod
    def get_schema(self, workspace_id: str) -> Optional[SchemaDefinition]:
        """Return the workspace schema, or None if it was never created."""

    @abstractmethod
    def upsert_schema(
        self,
        workspace_id: str,
        entity_types: List[EntityType],
        edge_types: List[EdgeType],
    ) -> SchemaDefinition:
        """
        Create the workspace schema or merge types into it.

        Implementations merge with ``merge_types`` and bump the version, so
        concurrent upserts of the same definitions converge.
        """

    @abstractmethod
    def create_entity(self, workspace_id: str, attrs: EntityAttrs) -> Entity:
        """Create an entity and return it with its generated ID."""

    @abstractmethod
    def get_entity(self, workspace_id: str, entity_id: str) -> Optional[Entity]:
        """Return an entity, or None if it does not exist in the workspace."""

    @abstractmethod
    def get_neighbors(
        self,
        workspace_id: str,
        entity_id: str,
        direction: str = "both",
        edge_type: Optional[str] = None,
    ) -> List[Entity]:
        """Return the distinct entities one edge away from an entity."""

    @abstractmethod
    def traverse(
        self,
        workspace_id: str,
        start_id: str,
        max_depth: int,
        edge_type: Optional[str] = None,
    ) -> List[Entity]:
        """
        Return entities reachable from ``start_id`` within ``max_depth`` hops.

        Edges are followed in both directions. The start entity is excluded
        and results are ordered by hop distance. Implementations backed by a
        database may cap the number of results; the nearest entities are
        kept and hitting the cap is logged.
        """

    @abstractmethod
    def create_edge(
        self,
        workspace_id: str,
        edge_type: str,
        source_id: str,
        target_id: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Optional[Edge]:
        """Create a directed edge, or return None if an endpoint is missing."""

    @abstractmethod
    def check_connection(self) -> bool:
        """Return True if the backing store is reachable."""

    def close(self) -> None:
        """Release resources held by the gateway."""
