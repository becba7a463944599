"""
Knowledge entry use cases for Knowledge Graph MCP.
"""

from typing import Any, List, Mapping, Optional

from loguru import logger
from pydantic import BaseModel, Field

from knowledge_graph_mcp.db.gateway import GraphGateway
from knowledge_graph_mcp.errors import EntityNotFoundError
from knowledge_graph_mcp.schema.codec import EntityCodec
from knowledge_graph_mcp.schema.entity_types import KnowledgeEntry
from knowledge_graph_mcp.schema.relationship_types import KnowledgeRelationship
from knowledge_graph_mcp.schema.validator import SchemaValidator
from knowledge_graph_mcp.services.bootstrap import SchemaBootstrapper


class KnowledgeEntryDetails(BaseModel):
    """A knowledge entry together with the relationships derived from its neighbors."""

    entry: KnowledgeEntry
    relationships: List[KnowledgeRelationship] = Field(default_factory=list)


class KnowledgeEntryService:
    """Create and fetch knowledge entries."""

    def __init__(
        self,
        gateway: GraphGateway,
        bootstrapper: Optional[SchemaBootstrapper] = None,
        codec: Optional[EntityCodec] = None,
        validator: Optional[SchemaValidator] = None,
    ):
        self.gateway = gateway
        self.bootstrapper = bootstrapper or SchemaBootstrapper(gateway)
        self.codec = codec or EntityCodec()
        self.validator = validator or SchemaValidator()

    def create(self, workspace_id: str, attrs: Mapping[str, Any]) -> KnowledgeEntry:
        """
        Create a knowledge entry.

        Attributes are validated before any gateway call; the workspace
        schema is then bootstrapped and the entity written.

        Args:
            workspace_id: Owning workspace
            attrs: Entry attributes (title, body, category, tags,
                code_snippets, file_paths, external_links, last_verified_at)

        Returns:
            The created KnowledgeEntry

        Raises:
            KnowledgeValidationError: If the attributes are invalid
        """
        self.validator.validate_entry_attrs(attrs)
        self.bootstrapper.ensure(workspace_id)

        entity = self.gateway.create_entity(workspace_id, self.codec.to_entity_attrs(attrs))
        logger.info(f"Created knowledge entry {entity.id} in workspace {workspace_id}")
        return self.codec.to_knowledge_entry(entity)

    def get(self, workspace_id: str, entry_id: str) -> KnowledgeEntryDetails:
        """
        Fetch a knowledge entry with its relationships.

        Every neighbor yields a ``relates_to`` relationship, whatever the
        label of the edge connecting them.

        Args:
            workspace_id: Owning workspace
            entry_id: Entry identifier

        Returns:
            KnowledgeEntryDetails

        Raises:
            EntityNotFoundError: If the entry does not exist
        """
        entity = self.gateway.get_entity(workspace_id, entry_id)
        if entity is None:
            raise EntityNotFoundError(entry_id)

        neighbors = self.gateway.get_neighbors(workspace_id, entry_id)
        relationships = [self.codec.to_relationship(entry_id, neighbor) for neighbor in neighbors]

        return KnowledgeEntryDetails(
            entry=self.codec.to_knowledge_entry(entity),
            relationships=relationships,
        )
