"""
Tests for the in-memory graph gateway and the shared schema merge.
"""

import unittest

from knowledge_graph_mcp.db.gateway import merge_types, validate_max_depth
from knowledge_graph_mcp.db.in_memory_gateway import InMemoryGraphGateway
from knowledge_graph_mcp.schema.entity_types import EntityAttrs, EntityType, PropertyDef
from knowledge_graph_mcp.schema.relationship_types import EdgeType

from tests.fixtures import FOO_EDGE_TYPE, FOO_ENTITY_TYPE, WORKSPACE_ID


class TestMergeTypes(unittest.TestCase):
    """Test cases for merge_types."""

    def test_union_keeps_existing_order(self):
        """Test that new names are appended after existing ones."""
        merged = merge_types([EdgeType(name="a"), EdgeType(name="b")], [EdgeType(name="c"), EdgeType(name="a")])

        self.assertEqual([edge_type.name for edge_type in merged], ["a", "b", "c"])

    def test_incoming_definition_wins(self):
        """Test that a redefined type takes the incoming definition."""
        updated = EntityType(name="Foo", properties=[PropertyDef(name="size", type="integer")])

        merged = merge_types([FOO_ENTITY_TYPE], [updated])

        self.assertEqual(merged, [updated])

    def test_validate_max_depth(self):
        """Test the gateway depth bounds."""
        self.assertEqual(validate_max_depth(1), 1)
        self.assertEqual(validate_max_depth(10), 10)
        for bad in (0, 11, "3", True, None):
            with self.assertRaises(ValueError):
                validate_max_depth(bad)


class TestInMemoryGraphGateway(unittest.TestCase):
    """Test cases for InMemoryGraphGateway."""

    def setUp(self):
        """Set up test fixtures."""
        self.gateway = InMemoryGraphGateway()

    def _entity(self, label: str, workspace_id: str = WORKSPACE_ID) -> str:
        return self.gateway.create_entity(workspace_id, EntityAttrs(type="Foo", properties={"label": label})).id

    def _edge(self, source_id: str, target_id: str, edge_type: str = "relates_to") -> None:
        self.assertIsNotNone(self.gateway.create_edge(WORKSPACE_ID, edge_type, source_id, target_id))

    def test_schema_versions(self):
        """Test that upserts merge types and bump the version."""
        first = self.gateway.upsert_schema(WORKSPACE_ID, [FOO_ENTITY_TYPE], [FOO_EDGE_TYPE])
        second = self.gateway.upsert_schema(WORKSPACE_ID, [], [EdgeType(name="relates_to")])

        self.assertEqual(first.version, 1)
        self.assertEqual(second.version, 2)
        self.assertEqual(second.id, first.id)
        self.assertEqual(second.edge_type_names(), ["owns", "relates_to"])
        self.assertTrue(second.has_entity_type("Foo"))

    def test_schema_copies_are_detached(self):
        """Test that mutating a returned schema does not change the stored one."""
        self.gateway.upsert_schema(WORKSPACE_ID, [FOO_ENTITY_TYPE], [])

        self.gateway.get_schema(WORKSPACE_ID).entity_types.clear()

        self.assertTrue(self.gateway.get_schema(WORKSPACE_ID).has_entity_type("Foo"))

    def test_entities_are_workspace_scoped(self):
        """Test that an entity is invisible from another workspace."""
        entity_id = self._entity("mine")

        self.assertIsNotNone(self.gateway.get_entity(WORKSPACE_ID, entity_id))
        self.assertIsNone(self.gateway.get_entity("ws-other", entity_id))

    def test_create_edge_missing_endpoint(self):
        """Test that an edge to a missing entity is not created."""
        entity_id = self._entity("lonely")

        self.assertIsNone(self.gateway.create_edge(WORKSPACE_ID, "relates_to", entity_id, "missing"))
        self.assertEqual(self.gateway.get_neighbors(WORKSPACE_ID, entity_id), [])

    def test_neighbor_directions(self):
        """Test outgoing, incoming and undirected neighbor lookups."""
        a, b, c = self._entity("a"), self._entity("b"), self._entity("c")
        self._edge(a, b)
        self._edge(c, a)

        self.assertEqual([e.id for e in self.gateway.get_neighbors(WORKSPACE_ID, a, direction="out")], [b])
        self.assertEqual([e.id for e in self.gateway.get_neighbors(WORKSPACE_ID, a, direction="in")], [c])
        self.assertEqual([e.id for e in self.gateway.get_neighbors(WORKSPACE_ID, a)], [b, c])

        with self.assertRaises(ValueError):
            self.gateway.get_neighbors(WORKSPACE_ID, a, direction="sideways")

    def test_neighbors_are_distinct(self):
        """Test that parallel edges yield a single neighbor."""
        a, b = self._entity("a"), self._entity("b")
        self._edge(a, b, "relates_to")
        self._edge(b, a, "depends_on")

        self.assertEqual([e.id for e in self.gateway.get_neighbors(WORKSPACE_ID, a)], [b])

    def test_traverse_orders_by_distance(self):
        """Test breadth-first order with the start node excluded."""
        a, b, c, d = (self._entity(label) for label in "abcd")
        self._edge(a, b)
        self._edge(b, c)
        self._edge(d, a)

        reached = [e.id for e in self.gateway.traverse(WORKSPACE_ID, a, 2)]

        self.assertEqual(reached, [b, d, c])
        self.assertNotIn(a, reached)

    def test_traverse_respects_depth(self):
        """Test that nodes beyond max_depth are not reached."""
        a, b, c = self._entity("a"), self._entity("b"), self._entity("c")
        self._edge(a, b)
        self._edge(b, c)

        self.assertEqual([e.id for e in self.gateway.traverse(WORKSPACE_ID, a, 1)], [b])

    def test_traverse_edge_filter(self):
        """Test that only edges of the requested type are followed."""
        a, b, c = self._entity("a"), self._entity("b"), self._entity("c")
        self._edge(a, b, "depends_on")
        self._edge(a, c, "relates_to")

        self.assertEqual([e.id for e in self.gateway.traverse(WORKSPACE_ID, a, 3, "depends_on")], [b])

    def test_traverse_handles_cycles(self):
        """Test that cycles do not produce duplicates."""
        a, b, c = self._entity("a"), self._entity("b"), self._entity("c")
        self._edge(a, b)
        self._edge(b, c)
        self._edge(c, a)

        self.assertEqual(sorted(e.id for e in self.gateway.traverse(WORKSPACE_ID, a, 5)), sorted([b, c]))

    def test_traverse_rejects_bad_depth(self):
        """Test that the gateway refuses unbounded depths."""
        with self.assertRaises(ValueError):
            self.gateway.traverse(WORKSPACE_ID, "any", 0)

    def test_reset(self):
        """Test that reset drops everything."""
        entity_id = self._entity("gone")
        self.gateway.upsert_schema(WORKSPACE_ID, [FOO_ENTITY_TYPE], [])

        self.gateway.reset()

        self.assertIsNone(self.gateway.get_entity(WORKSPACE_ID, entity_id))
        self.assertIsNone(self.gateway.get_schema(WORKSPACE_ID))
        self.assertTrue(self.gateway.check_connection())


if __name__ == "__main__":
    unittest.main()
