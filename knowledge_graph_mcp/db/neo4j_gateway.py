"""
Neo4j graph gateway for Knowledge Graph MCP.

This module implements the GraphGateway contract on a Neo4j database.
Entities are ``:Entity`` nodes and edges are ``:EDGE`` relationships, both
tagged with their workspace ID for tenant isolation; the entity/edge type is
stored as a property. Property maps are stored JSON-encoded since Neo4j
does not allow map-valued properties. Each workspace schema is a single
``:SchemaDefinition`` node.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from neo4j import GraphDatabase, Driver, ManagedTransaction, Record
from neo4j.exceptions import ClientError, Neo4jError
from loguru import logger

from knowledge_graph_mcp.db.gateway import (
    NEIGHBOR_DIRECTIONS,
    GraphGateway,
    merge_types,
    validate_max_depth,
)
from knowledge_graph_mcp.schema.entity_types import Entity, EntityAttrs, EntityType, SchemaDefinition
from knowledge_graph_mcp.schema.relationship_types import Edge, EdgeType

DEFAULT_TRAVERSAL_LIMIT = 1000

CONSTRAINTS = [
    (
        "entity_id_uniqueness",
        "CREATE CONSTRAINT entity_id_uniqueness IF NOT EXISTS FOR (e:Entity) REQUIRE e.id IS UNIQUE",
    ),
    (
        "schema_workspace_uniqueness",
        "CREATE CONSTRAINT schema_workspace_uniqueness IF NOT EXISTS "
        "FOR (s:SchemaDefinition) REQUIRE s.workspace_id IS UNIQUE",
    ),
    (
        "entity_workspace_index",
        "CREATE INDEX entity_workspace_index IF NOT EXISTS FOR (e:Entity) ON (e.workspace_id)",
    ),
]

NEIGHBOR_PATTERNS = {
    "out": "(start)-[r:EDGE]->(neighbor:Entity)",
    "in": "(start)<-[r:EDGE]-(neighbor:Entity)",
    "both": "(start)-[r:EDGE]-(neighbor:Entity)",
}


class Neo4jGraphGateway(GraphGateway):
    """
    Neo4j implementation of the graph gateway.

    All values are passed as query parameters. The only interpolated value
    is the traversal depth, which is validated as a bounded integer first.
    """

    def __init__(self, uri: str, user: str, password: str, database: Optional[str] = None):
        """
        Initialize the gateway and ensure constraints exist.

        Args:
            uri: Neo4j connection URI
            user: Neo4j username
            password: Neo4j password
            database: Database name, or None for the server default
        """
        self.uri = uri
        self.user = user
        self.password = password
        self.database = database
        self.driver = self._create_driver()

        self._ensure_constraints()

    def _create_driver(self) -> Driver:
        try:
            return GraphDatabase.driver(self.uri, auth=(self.user, self.password))
        except Exception as e:
            logger.error(f"Failed to create Neo4j driver: {str(e)}")
            raise

    def _ensure_constraints(self):
        """Ensure uniqueness constraints and indexes exist."""
        with self.driver.session(database=self.database) as session:
            for name, query in CONSTRAINTS:
                try:
                    session.run(query)
                    logger.debug(f"Ensured constraint: {name}")
                except ClientError as e:
                    logger.warning(f"Could not create constraint {name}: {str(e)}")

    def check_connection(self) -> bool:
        try:
            with self.driver.session(database=self.database) as session:
                result = session.run("RETURN 1 AS result")
                return result.single()["result"] == 1
        except Exception as e:
            logger.error(f"Neo4j connection check failed: {str(e)}")
            return False

    def close(self):
        if self.driver:
            self.driver.close()

    def get_timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def _generate_id(self) -> str:
        return str(uuid.uuid4())

    def _run(self, query: str, parameters: Dict[str, Any]) -> List[Record]:
        """Run a query in an auto-commit transaction and collect its records."""
        try:
            with self.driver.session(database=self.database) as session:
                result = session.run(query, parameters=parameters)
                return list(result)
        except Neo4jError as e:
            logger.error(f"Neo4j query failed: {str(e)}")
            raise

    # Schema

    def get_schema(self, workspace_id: str) -> Optional[SchemaDefinition]:
        query = """
        MATCH (s:SchemaDefinition {workspace_id: $workspace_id})
        RETURN s
        """
        records = self._run(query, {"workspace_id": workspace_id})
        if not records:
            return None
        return self._node_to_schema(records[0]["s"])

    def upsert_schema(
        self,
        workspace_id: str,
        entity_types: List[EntityType],
        edge_types: List[EdgeType],
    ) -> SchemaDefinition:
        try:
            with self.driver.session(database=self.database) as session:
                schema = session.execute_write(
                    self._upsert_schema_tx,
                    workspace_id,
                    entity_types,
                    edge_types,
                )
        except Neo4jError as e:
            logger.error(f"Schema upsert failed for workspace {workspace_id}: {str(e)}")
            raise

        logger.debug(f"Schema for workspace {workspace_id} now at version {schema.version}")
        return schema

    def _upsert_schema_tx(
        self,
        tx: ManagedTransaction,
        workspace_id: str,
        entity_types: List[EntityType],
        edge_types: List[EdgeType],
    ) -> SchemaDefinition:
        timestamp = self.get_timestamp()

        # Writing to the node first takes its write lock, so the merge below
        # sees the latest committed types
        lock_query = """
        MERGE (s:SchemaDefinition {workspace_id: $workspace_id})
        ON CREATE SET s.id = $id, s.version = 0, s.entity_types = '[]',
                      s.edge_types = '[]', s.created_at = $now
        SET s.updated_at = $now
        RETURN s
        """
        record = tx.run(
            lock_query,
            workspace_id=workspace_id,
            id=self._generate_id(),
            now=timestamp,
        ).single()
        current = self._node_to_schema(record["s"])

        merged_entity_types = merge_types(current.entity_types, entity_types)
        merged_edge_types = merge_types(current.edge_types, edge_types)

        write_query = """
        MATCH (s:SchemaDefinition {workspace_id: $workspace_id})
        SET s.version = $version,
            s.entity_types = $entity_types,
            s.edge_types = $edge_types
        RETURN s
        """
        record = tx.run(
            write_query,
            workspace_id=workspace_id,
            version=current.version + 1,
            entity_types=json.dumps([t.model_dump() for t in merged_entity_types]),
            edge_types=json.dumps([t.model_dump() for t in merged_edge_types]),
        ).single()
        return self._node_to_schema(record["s"])

    # Entities

    def create_entity(self, workspace_id: str, attrs: EntityAttrs) -> Entity:
        query = """
        CREATE (e:Entity {
            id: $id,
            workspace_id: $workspace_id,
            type: $type,
            properties: $properties,
            created_at: $now,
            updated_at: $now
        })
        RETURN e
        """
        records = self._run(
            query,
            {
                "id": self._generate_id(),
                "workspace_id": workspace_id,
                "type": attrs.type,
                "properties": json.dumps(attrs.properties),
                "now": self.get_timestamp(),
            },
        )
        return self._node_to_entity(records[0]["e"])

    def get_entity(self, workspace_id: str, entity_id: str) -> Optional[Entity]:
        query = """
        MATCH (e:Entity {workspace_id: $workspace_id, id: $id})
        RETURN e
        """
        records = self._run(query, {"workspace_id": workspace_id, "id": entity_id})
        if not records:
            return None
        return self._node_to_entity(records[0]["e"])

    # Edges

    def create_edge(
        self,
        workspace_id: str,
        edge_type: str,
        source_id: str,
        target_id: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Optional[Edge]:
        query = """
        MATCH (source:Entity {workspace_id: $workspace_id, id: $source_id})
        MATCH (target:Entity {workspace_id: $workspace_id, id: $target_id})
        CREATE (source)-[r:EDGE {
            id: $id,
            workspace_id: $workspace_id,
            type: $type,
            properties: $properties,
            created_at: $now
        }]->(target)
        RETURN r, source.id AS source_id, target.id AS target_id
        """
        records = self._run(
            query,
            {
                "id": self._generate_id(),
                "workspace_id": workspace_id,
                "type": edge_type,
                "source_id": source_id,
                "target_id": target_id,
                "properties": json.dumps(properties or {}),
                "now": self.get_timestamp(),
            },
        )
        if not records:
            return None

        record = records[0]
        data = dict(record["r"].items())
        return Edge(
            id=data["id"],
            workspace_id=data["workspace_id"],
            type=data["type"],
            source_id=record["source_id"],
            target_id=record["target_id"],
            properties=json.loads(data.get("properties") or "{}"),
            created_at=data.get("created_at"),
        )

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

        query = f"""
        MATCH (start:Entity {{workspace_id: $workspace_id, id: $id}})
        MATCH {NEIGHBOR_PATTERNS[direction]}
        WHERE neighbor.workspace_id = $workspace_id
          AND ($edge_type IS NULL OR r.type = $edge_type)
        WITH DISTINCT neighbor
        RETURN neighbor
        ORDER BY neighbor.created_at
        """
        records = self._run(
            query,
            {"workspace_id": workspace_id, "id": entity_id, "edge_type": edge_type},
        )
        return [self._node_to_entity(record["neighbor"]) for record in records]

    def traverse(
        self,
        workspace_id: str,
        start_id: str,
        max_depth: int,
        edge_type: Optional[str] = None,
        limit: int = DEFAULT_TRAVERSAL_LIMIT,
    ) -> List[Entity]:
        max_depth = validate_max_depth(max_depth)

        query = f"""
        MATCH (start:Entity {{workspace_id: $workspace_id, id: $id}})
        MATCH path = (start)-[:EDGE*1..{max_depth}]-(connected:Entity)
        WHERE connected.workspace_id = $workspace_id
          AND connected.id <> $id
          AND ($edge_type IS NULL OR ALL(rel IN relationships(path) WHERE rel.type = $edge_type))
        WITH connected, min(length(path)) AS hops
        RETURN connected
        ORDER BY hops, connected.created_at
        LIMIT $limit
        """
        records = self._run(
            query,
            {
                "workspace_id": workspace_id,
                "id": start_id,
                "edge_type": edge_type,
                "limit": limit,
            },
        )
        if len(records) >= limit:
            logger.warning(
                f"Traversal from {start_id} in workspace {workspace_id} hit the {limit} result limit; "
                f"farther entities were dropped"
            )
        return [self._node_to_entity(record["connected"]) for record in records]

    # Record conversion

    @staticmethod
    def _node_to_entity(node: Any) -> Entity:
        data = dict(node.items())
        return Entity(
            id=data["id"],
            workspace_id=data["workspace_id"],
            type=data["type"],
            properties=json.loads(data.get("properties") or "{}"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    @staticmethod
    def _node_to_schema(node: Any) -> SchemaDefinition:
        data = dict(node.items())
        return SchemaDefinition(
            id=data["id"],
            workspace_id=data["workspace_id"],
            version=data.get("version", 0),
            entity_types=json.loads(data.get("entity_types") or "[]"),
            edge_types=json.loads(data.get("edge_types") or "[]"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
