"""
Shared test data for the Knowledge Graph MCP test suite.
"""

import json
import uuid
from typing import Dict, Any, List, Optional

from knowledge_graph_mcp.schema.entity_types import (
    KNOWLEDGE_ENTRY_ENTITY_TYPE,
    Entity,
    EntityType,
    PropertyDef,
    SchemaDefinition,
)
from knowledge_graph_mcp.schema.relationship_types import REQUIRED_EDGE_TYPES, EdgeType

WORKSPACE_ID = "ws-test-0001"

FOO_ENTITY_TYPE = EntityType(name="Foo", properties=[PropertyDef(name="label", type="string")])
FOO_EDGE_TYPE = EdgeType(name="owns")


def unique_id() -> str:
    return str(uuid.uuid4())


def entry_attrs(**overrides) -> Dict[str, Any]:
    """Valid attributes for a new knowledge entry."""
    attrs = {
        "title": "How to deploy",
        "body": "## Deployment steps...",
        "category": "how_to",
        "tags": ["devops", "deployment"],
        "code_snippets": [{"language": "bash", "code": "make release"}],
        "file_paths": ["deploy/release.sh"],
        "external_links": [{"url": "https://example.com/runbook"}],
        "last_verified_at": "2026-01-15T10:00:00Z",
    }
    attrs.update(overrides)
    return attrs


def knowledge_properties(**overrides) -> Dict[str, Any]:
    """Stored property bag of a KnowledgeEntry entity."""
    properties = {
        "title": "Architecture Decisions",
        "body": "We use a layered architecture because...",
        "category": "architecture_decision",
        "tags": json.dumps(["architecture", "design"]),
        "code_snippets": json.dumps([{"language": "python", "code": "class Foo: ..."}]),
        "file_paths": json.dumps(["src/foo.py"]),
        "external_links": json.dumps([{"url": "https://example.com/adr"}]),
        "last_verified_at": "2026-01-15T10:00:00Z",
    }
    properties.update(overrides)
    return properties


def knowledge_entity(
    entity_id: Optional[str] = None,
    workspace_id: str = WORKSPACE_ID,
    **property_overrides,
) -> Entity:
    """A KnowledgeEntry entity as returned by a gateway."""
    return Entity(
        id=entity_id or unique_id(),
        workspace_id=workspace_id,
        type="KnowledgeEntry",
        properties=knowledge_properties(**property_overrides),
        created_at="2026-01-01T00:00:00Z",
        updated_at="2026-01-02T00:00:00Z",
    )


def foo_entity(entity_id: Optional[str] = None, workspace_id: str = WORKSPACE_ID) -> Entity:
    """An entity of an unrelated type sharing the workspace graph."""
    return Entity(
        id=entity_id or unique_id(),
        workspace_id=workspace_id,
        type="Foo",
        properties={"label": "not knowledge"},
    )


def schema_definition(
    entity_types: List[EntityType],
    edge_types: List[EdgeType],
    workspace_id: str = WORKSPACE_ID,
    version: int = 1,
) -> SchemaDefinition:
    return SchemaDefinition(
        id=unique_id(),
        workspace_id=workspace_id,
        version=version,
        entity_types=entity_types,
        edge_types=edge_types,
    )


def schema_with_knowledge(workspace_id: str = WORKSPACE_ID) -> SchemaDefinition:
    return schema_definition([KNOWLEDGE_ENTRY_ENTITY_TYPE], list(REQUIRED_EDGE_TYPES), workspace_id)


def schema_without_knowledge(workspace_id: str = WORKSPACE_ID) -> SchemaDefinition:
    return schema_definition([FOO_ENTITY_TYPE], [FOO_EDGE_TYPE], workspace_id)
