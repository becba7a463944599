"""
Relationship types schema for Knowledge Graph MCP.

This module defines the edge types knowledge entries can be connected by,
the generic graph edge as stored by the gateway, and the KnowledgeRelationship
domain record.
"""

from enum import Enum
from typing import Dict, Any, List, Optional

from pydantic import BaseModel, Field


class KnowledgeRelationshipType(str, Enum):
    """Edge types between knowledge entries."""

    RELATES_TO = "relates_to"  # Generic association
    DEPENDS_ON = "depends_on"  # Entry requires another to be true or in place
    PREREQUISITE_FOR = "prerequisite_for"  # Entry should be read before another
    EXAMPLE_OF = "example_of"  # Entry illustrates another
    PART_OF = "part_of"  # Entry is a section of another
    SUPERSEDES = "supersedes"  # Entry replaces an outdated one


RELATIONSHIP_TYPES = [relationship_type.value for relationship_type in KnowledgeRelationshipType]


class EdgeType(BaseModel):
    """An edge type registered in a workspace schema."""

    name: str = Field(..., description="Edge type name")


REQUIRED_EDGE_TYPES: List[EdgeType] = [EdgeType(name=name) for name in RELATIONSHIP_TYPES]


class Edge(BaseModel):
    """Generic graph edge as stored by the gateway."""

    id: str = Field(..., description="Unique identifier for the edge")
    workspace_id: str = Field(..., description="Owning workspace")
    type: str = Field(..., description="Edge type name")
    source_id: str = Field(..., description="Source entity ID")
    target_id: str = Field(..., description="Target entity ID")
    properties: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = Field(None, description="ISO timestamp of creation")


class KnowledgeRelationship(BaseModel):
    """
    Relationship between two knowledge entries.

    Relationships derived from neighbor lookups are not stored; they are
    built on the fly and always carry the ``relates_to`` type. Only
    relationships returned from edge creation carry an ``id`` and the
    real edge type.
    """

    from_id: str = Field(..., description="Source entry ID")
    to_id: str = Field(..., description="Target entry ID")
    type: str = Field(KnowledgeRelationshipType.RELATES_TO.value, description="Relationship type")
    id: Optional[str] = Field(None, description="Underlying edge ID, when known")
