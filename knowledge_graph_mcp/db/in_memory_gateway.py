"""
In-memory graph gateway for Knowledge Graph MCP.

Dict-backed implementation of the GraphGateway contract, used by the test
suite and for local development without Neo4j. Records are scoped by
workspace ID; edges are kept in insertion order.
"""

import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Tuple

from loguru import logger

from knowledge_graph_mcp.db.gateway import (
    NEIGHBOR_DIRECTIONS,
    GraphGateway,
    merge_types,
    validate_max_depth,
)
from knowledge_graph_mcp.schema.entity_types import Entity, EntityAttrs, EntityType, SchemaDefinition
from knowledge_graph_mcp.schema.relationship_types import Edge, EdgeType


class InMemoryGraphGateway(GraphGateway):
    """
    Graph gateway holding all data in process memory.

    Safe to share between threads; every mutation happens under a lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._schemas: Dict[str, SchemaDefinition] = {}
        self._entities: Dict[Tuple[str, str], Entity] = {}
        self._edges: Dict[Tuple[str, str], Edge] = {}

    def reset(self) -> None:
        """Drop all stored data."""
        with self._lock:
            self._schemas.clear()
            self._entities.clear()
            self._edges.clear()

    def get_timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def _generate_id(self) -> str:
        return str(uuid.uuid4())

    # Schema

    def get_schema(self, workspace_id: str) -> Optional[SchemaDefinition]:
        schema = self._schemas.get(workspace_id)
        return schema.model_copy(deep=True) if schema else None

    def upsert_schema(
        self,
        workspace_id: str,
        entity_types: List[EntityType],
        edge_types: List[EdgeType],
    ) -> SchemaDefinition:
        with self._lock:
            timestamp = self.get_timestamp()
            current = self._schemas.get(workspace_id)
            if current is None:
                schema = SchemaDefinition(
                    id=self._generate_id(),
                    workspace_id=workspace_id,
                    version=1,
                    entity_types=merge_types([], entity_types),
                    edge_types=merge_types([], edge_types),
                    created_at=timestamp,
                    updated_at=timestamp,
                )
            else:
                schema = current.model_copy(
                    update={
                        "version": current.version + 1,
                        "entity_types": merge_types(current.entity_types, entity_types),
                        "edge_types": merge_types(current.edge_types, edge_types),
                        "updated_at": timestamp,
                    }
                )
            self._schemas[workspace_id] = schema
            logger.debug(f"Schema for workspace {workspace_id} now at version {schema.version}")
            return schema.model_copy(deep=True)

    # Entities

    def create_entity(self, workspace_id: str, attrs: EntityAttrs) -> Entity:
        timestamp = self.get_timestamp()
        entity = Entity(
            id=self._generate_id(),
            workspace_id=workspace_id,
            type=attrs.type,
            properties=dict(attrs.properties),
            created_at=timestamp,
            updated_at=timestamp,
        )
        with self._lock:
            self._entities[(workspace_id, entity.id)] = entity
        return entity.model_copy(deep=True)

    def get_entity(self, workspace_id: str, entity_id: str) -> Optional[Entity]:
        entity = self._entities.get((workspace_id, entity_id))
        return entity.model_copy(deep=True) if entity else None

    # Edges

    def create_edge(
        self,
        workspace_id: str,
        edge_type: str,
        source_id: str,
        target_id: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Optional[Edge]:
        with self._lock:
            if (workspace_id, source_id) not in self._entities or (workspace_id, target_id) not in self._entities:
                return None
            edge = Edge(
                id=self._generate_id(),
                workspace_id=workspace_id,
                type=edge_type,
                source_id=source_id,
                target_id=target_id,
                properties=dict(properties or {}),
                created_at=self.get_timestamp(),
            )
            self._edges[(workspace_id, edge.id)] = edge
        return edge.model_copy(deep=True)

    def _workspace_edges(self, workspace_id: str, edge_type: Optional[str] = None) -> List[Edge]:
        return [
            edge
            for (ws_id, _), edge in list(self._edges.items())
            if ws_id == workspace_id and (edge_type is None or edge.type == edge_type)
        ]

    # Traversal

    def get_neighbors(
        self,
        workspace_id: str,
        entity_id: str,
        direction: str = "both",
        edge_type: Optional[str] = None,
    ) -> List[Entity]:
        if direction not in NEIGHBOR_DIRECTIONS:
            raise ValueError(f"direction must be one of {NEIGHBOR_DIRECTIONS}, got {direction!r}")

        neighbor_ids: List[str] = []
        for edge in self._workspace_edges(workspace_id, edge_type):
            if direction in ("out", "both") and edge.source_id == entity_id:
                neighbor_ids.append(edge.target_id)
            elif direction in ("in", "both") and edge.target_id == entity_id:
                neighbor_ids.append(edge.source_id)

        return self._resolve(workspace_id, dict.fromkeys(neighbor_ids))

    def traverse(
        self,
        workspace_id: str,
        start_id: str,
        max_depth: int,
        edge_type: Optional[str] = None,
    ) -> List[Entity]:
        validate_max_depth(max_depth)
        edges = self._workspace_edges(workspace_id, edge_type)

        adjacency: Dict[str, List[str]] = {}
        for edge in edges:
            adjacency.setdefault(edge.source_id, []).append(edge.target_id)
            adjacency.setdefault(edge.target_id, []).append(edge.source_id)

        # Breadth-first, so results come out ordered by hop distance
        visited = {start_id}
        reached: List[str] = []
        queue = deque([(start_id, 0)])
        while queue:
            current_id, depth = queue.popleft()
            if depth >= max_depth:
                continue
            for neighbor_id in adjacency.get(current_id, []):
                if neighbor_id in visited:
                    continue
                visited.add(neighbor_id)
                reached.append(neighbor_id)
                queue.append((neighbor_id, depth + 1))

        return self._resolve(workspace_id, reached)

    def _resolve(self, workspace_id: str, entity_ids) -> List[Entity]:
        entities = []
        for entity_id in entity_ids:
            entity = self.get_entity(workspace_id, entity_id)
            if entity is not None:
                entities.append(entity)
        return entities

    def check_connection(self) -> bool:
        return True
