"""
Knowledge relationship use cases for Knowledge Graph MCP.
"""

from typing import Any, Mapping, Optional

from loguru import logger

from knowledge_graph_mcp.db.gateway import GraphGateway
from knowledge_graph_mcp.errors import EntityNotFoundError
from knowledge_graph_mcp.schema.relationship_types import KnowledgeRelationship
from knowledge_graph_mcp.schema.validator import SchemaValidator
from knowledge_graph_mcp.services.bootstrap import SchemaBootstrapper


class KnowledgeRelationshipService:
    """Connect knowledge entries with typed edges."""

    def __init__(
        self,
        gateway: GraphGateway,
        bootstrapper: Optional[SchemaBootstrapper] = None,
        validator: Optional[SchemaValidator] = None,
    ):
        self.gateway = gateway
        self.bootstrapper = bootstrapper or SchemaBootstrapper(gateway)
        self.validator = validator or SchemaValidator()

    def create(self, workspace_id: str, attrs: Mapping[str, Any]) -> KnowledgeRelationship:
        """
        Create a relationship between two knowledge entries.

        Args:
            workspace_id: Owning workspace
            attrs: ``from_id``, ``to_id`` and ``type``

        Returns:
            KnowledgeRelationship carrying the created edge's ID and type

        Raises:
            KnowledgeValidationError: If an endpoint is missing, the type is
                unknown, or both endpoints are the same entry
            EntityNotFoundError: If either entry does not exist
        """
        self.validator.validate_relationship_attrs(attrs)
        self.bootstrapper.ensure(workspace_id)

        from_id = attrs["from_id"]
        to_id = attrs["to_id"]
        for entry_id in (from_id, to_id):
            if self.gateway.get_entity(workspace_id, entry_id) is None:
                raise EntityNotFoundError(entry_id)

        edge = self.gateway.create_edge(workspace_id, attrs["type"], from_id, to_id)
        if edge is None:
            # An endpoint disappeared between the existence check and the write
            raise EntityNotFoundError(from_id)

        logger.info(f"Created {edge.type} edge {edge.id} from {from_id} to {to_id} in workspace {workspace_id}")
        return KnowledgeRelationship(
            id=edge.id,
            from_id=edge.source_id,
            to_id=edge.target_id,
            type=edge.type,
        )
