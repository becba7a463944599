"""
Integration tests for the Neo4j graph gateway with a real Neo4j instance.

These tests use testcontainers to start an isolated Neo4j container, so
Docker must be available. They can be run with:
pytest -m integration tests/test_neo4j_integration.py
"""

import unittest
from unittest import skipIf

import docker
import pytest
from docker.errors import DockerException
from testcontainers.neo4j import Neo4jContainer

from knowledge_graph_mcp.db.neo4j_gateway import Neo4jGraphGateway
from knowledge_graph_mcp.schema.entity_types import EntityAttrs
from knowledge_graph_mcp.schema.relationship_types import EdgeType
from knowledge_graph_mcp.services import (
    GraphTraversalService,
    KnowledgeEntryService,
    KnowledgeRelationshipService,
    SchemaBootstrapper,
)
from knowledge_graph_mcp.services.bootstrap import BootstrapStatus

from tests.fixtures import FOO_EDGE_TYPE, FOO_ENTITY_TYPE, WORKSPACE_ID, entry_attrs

NEO4J_IMAGE = "neo4j:5.12.0"
NEO4J_PASSWORD = "password"


def _docker_available() -> bool:
    try:
        docker.from_env().ping()
    except DockerException:
        return False
    return True


DOCKER_AVAILABLE = _docker_available()


@pytest.mark.integration
@skipIf(not DOCKER_AVAILABLE, "Docker not available for Neo4j container")
class TestNeo4jGraphGateway(unittest.TestCase):
    """Integration tests for Neo4jGraphGateway."""

    @classmethod
    def setUpClass(cls):
        """Start a Neo4j container and connect the gateway."""
        cls.neo4j_container = Neo4jContainer(NEO4J_IMAGE, password=NEO4J_PASSWORD)
        cls.neo4j_container.start()

        cls.gateway = Neo4jGraphGateway(
            uri=cls.neo4j_container.get_connection_url(),
            user="neo4j",
            password=NEO4J_PASSWORD,
        )

    @classmethod
    def tearDownClass(cls):
        """Close the gateway and stop the container."""
        if hasattr(cls, "gateway") and cls.gateway:
            cls.gateway.close()

        if hasattr(cls, "neo4j_container") and cls.neo4j_container:
            cls.neo4j_container.stop()

    def setUp(self):
        """Start every test from an empty database."""
        with self.gateway.driver.session() as session:
            session.run("MATCH (n) DETACH DELETE n")

    def _entity(self, label: str, workspace_id: str = WORKSPACE_ID) -> str:
        return self.gateway.create_entity(workspace_id, EntityAttrs(type="Foo", properties={"label": label})).id

    def test_connection(self):
        """Test that the connection to Neo4j works."""
        self.assertTrue(self.gateway.check_connection())

    def test_schema_upsert_merges(self):
        """Test that upserts merge types and bump the version."""
        first = self.gateway.upsert_schema(WORKSPACE_ID, [FOO_ENTITY_TYPE], [FOO_EDGE_TYPE])
        second = self.gateway.upsert_schema(WORKSPACE_ID, [], [EdgeType(name="relates_to")])

        self.assertEqual(first.version, 1)
        self.assertEqual(second.version, 2)
        self.assertEqual(second.edge_type_names(), ["owns", "relates_to"])
        self.assertEqual(self.gateway.get_schema(WORKSPACE_ID), second)
        self.assertIsNone(self.gateway.get_schema("ws-other"))

    def test_entity_round_trip(self):
        """Test that entity properties survive storage."""
        created = self.gateway.create_entity(
            WORKSPACE_ID, EntityAttrs(type="Foo", properties={"label": "x", "count": 3})
        )

        fetched = self.gateway.get_entity(WORKSPACE_ID, created.id)

        self.assertEqual(fetched.properties, {"label": "x", "count": 3})
        self.assertIsNone(self.gateway.get_entity("ws-other", created.id))

    def test_create_edge_missing_endpoint(self):
        """Test that an edge to a missing entity is not created."""
        entity_id = self._entity("lonely")

        self.assertIsNone(self.gateway.create_edge(WORKSPACE_ID, "relates_to", entity_id, "missing"))

    def test_traverse(self):
        """Test distance ordering, depth bounds and edge filtering."""
        a, b, c, d = (self._entity(label) for label in "abcd")
        self.gateway.create_edge(WORKSPACE_ID, "depends_on", a, b)
        self.gateway.create_edge(WORKSPACE_ID, "depends_on", b, c)
        self.gateway.create_edge(WORKSPACE_ID, "relates_to", d, a)

        self.assertEqual([e.id for e in self.gateway.traverse(WORKSPACE_ID, a, 1)], [b, d])
        self.assertEqual([e.id for e in self.gateway.traverse(WORKSPACE_ID, a, 2)][-1], c)
        self.assertEqual([e.id for e in self.gateway.traverse(WORKSPACE_ID, a, 3, "depends_on")], [b, c])

    def test_knowledge_workflow(self):
        """Test the knowledge services end to end on Neo4j."""
        entries = KnowledgeEntryService(self.gateway)
        first = entries.create(WORKSPACE_ID, entry_attrs(title="First"))
        second = entries.create(WORKSPACE_ID, entry_attrs(title="Second"))

        KnowledgeRelationshipService(self.gateway).create(
            WORKSPACE_ID, {"from_id": first.id, "to_id": second.id, "type": "example_of"}
        )

        self.assertEqual(SchemaBootstrapper(self.gateway).ensure(WORKSPACE_ID).status, BootstrapStatus.ALREADY_BOOTSTRAPPED)
        self.assertEqual(entries.get(WORKSPACE_ID, first.id).entry.tags, ["devops", "deployment"])
        reached = GraphTraversalService(self.gateway).traverse(WORKSPACE_ID, {"start_id": first.id})
        self.assertEqual([entry.title for entry in reached], ["Second"])


if __name__ == "__main__":
    unittest.main()
