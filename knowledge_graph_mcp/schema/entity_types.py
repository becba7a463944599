"""
Entity types schema for Knowledge Graph MCP.

This module defines the graph schema records (property definitions, entity
types, per-workspace schema definitions), the generic graph entity as stored
by the gateway, and the strongly-typed KnowledgeEntry domain record.
"""

from enum import Enum
from typing import Dict, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from knowledge_graph_mcp.schema.relationship_types import EdgeType

KNOWLEDGE_ENTRY_TYPE = "KnowledgeEntry"

MAX_TAGS = 20
MAX_TITLE_LENGTH = 255
SNIPPET_LENGTH = 200

# Domain fields stored as JSON-encoded arrays inside the entity property map
LIST_FIELDS = ("tags", "code_snippets", "file_paths", "external_links")


class KnowledgeCategory(str, Enum):
    """Categories a knowledge entry can be filed under."""

    HOW_TO = "how_to"
    PATTERN = "pattern"
    CONVENTION = "convention"
    ARCHITECTURE_DECISION = "architecture_decision"
    GOTCHA = "gotcha"
    CONCEPT = "concept"
    REFERENCE = "reference"


KNOWLEDGE_CATEGORIES = [category.value for category in KnowledgeCategory]


class PropertyDef(BaseModel):
    """A typed property of an entity type."""

    name: str = Field(..., description="Property name")
    type: str = Field(..., description="Property value type (string, json, datetime, ...)")


class EntityType(BaseModel):
    """An entity type registered in a workspace schema."""

    name: str = Field(..., description="Entity type name, used as the entity's type tag")
    properties: List[PropertyDef] = Field(default_factory=list, description="Declared properties")


class SchemaDefinition(BaseModel):
    """
    Versioned graph schema of a single workspace.

    Owned by the graph gateway and only changed through ``upsert_schema``.
    """

    id: str = Field(..., description="Unique identifier for the schema")
    workspace_id: str = Field(..., description="Workspace the schema governs")
    version: int = Field(1, description="Incremented on every upsert")
    entity_types: List[EntityType] = Field(default_factory=list)
    edge_types: List[EdgeType] = Field(default_factory=list)
    created_at: Optional[str] = Field(None, description="ISO timestamp of creation")
    updated_at: Optional[str] = Field(None, description="ISO timestamp of last update")

    def has_entity_type(self, name: str) -> bool:
        return any(entity_type.name == name for entity_type in self.entity_types)

    def edge_type_names(self) -> List[str]:
        return [edge_type.name for edge_type in self.edge_types]


# The KnowledgeEntry entity type as registered in every bootstrapped workspace
KNOWLEDGE_ENTRY_ENTITY_TYPE = EntityType(
    name=KNOWLEDGE_ENTRY_TYPE,
    properties=[
        PropertyDef(name="title", type="string"),
        PropertyDef(name="body", type="string"),
        PropertyDef(name="category", type="string"),
        PropertyDef(name="tags", type="json"),
        PropertyDef(name="code_snippets", type="json"),
        PropertyDef(name="file_paths", type="json"),
        PropertyDef(name="external_links", type="json"),
        PropertyDef(name="last_verified_at", type="datetime"),
    ],
)


class EntityAttrs(BaseModel):
    """Attributes for creating a generic graph entity."""

    type: str = Field(..., description="Entity type name")
    properties: Dict[str, Any] = Field(default_factory=dict)


class Entity(BaseModel):
    """
    Generic graph entity as stored by the gateway.

    Properties are a flat string-keyed bag; structured values are stored
    JSON-encoded by whoever wrote them.
    """

    id: str = Field(..., description="Unique identifier for the entity")
    workspace_id: str = Field(..., description="Owning workspace")
    type: str = Field(..., description="Entity type name")
    properties: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = Field(None, description="ISO timestamp of creation")
    updated_at: Optional[str] = Field(None, description="ISO timestamp of last update")


class KnowledgeEntry(BaseModel):
    """
    Knowledge entry domain record.

    Only ever built from an Entity of type ``KnowledgeEntry`` through the
    entity codec. Category and tag limits are checked when an entry is
    created, not when it is read back.
    """

    id: str = Field(..., description="Entity identifier")
    workspace_id: Optional[str] = Field(None, description="Owning workspace")
    title: str = Field(..., description="Entry title")
    body: str = Field("", description="Markdown body")
    category: str = Field(..., description="One of the knowledge categories")
    tags: List[str] = Field(default_factory=list)
    code_snippets: List[Any] = Field(default_factory=list)
    file_paths: List[str] = Field(default_factory=list)
    external_links: List[Any] = Field(default_factory=list)
    last_verified_at: Optional[str] = Field(None, description="ISO timestamp of last verification")
    created_at: Optional[str] = Field(None, description="ISO timestamp of creation")
    updated_at: Optional[str] = Field(None, description="ISO timestamp of last update")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f1c9a4e-8d7b-4c52-9a0e-2b6f1d7e4a10",
                "workspace_id": "ws-7d2e",
                "title": "How to deploy",
                "body": "## Deployment steps...",
                "category": "how_to",
                "tags": ["devops", "deployment"],
                "code_snippets": [{"language": "bash", "code": "make release"}],
                "file_paths": ["deploy/release.sh"],
                "external_links": [{"url": "https://example.com/runbook"}],
                "last_verified_at": "2026-01-15T10:00:00Z",
            }
        }
    )

    def snippet(self) -> str:
        """Body preview for compact listings."""
        if not self.body:
            return ""
        if len(self.body) <= SNIPPET_LENGTH:
            return self.body
        return self.body[:SNIPPET_LENGTH] + "..."
