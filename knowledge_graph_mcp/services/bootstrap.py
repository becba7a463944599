"""
Knowledge schema bootstrap for Knowledge Graph MCP.

Makes sure a workspace's graph schema can store knowledge entries before
anything is written to it. The check is a single read when the schema is
already in place, so write paths call it unconditionally.
"""

from enum import Enum
from typing import Optional

from loguru import logger
from pydantic import BaseModel

from knowledge_graph_mcp.db.gateway import GraphGateway
from knowledge_graph_mcp.schema.entity_types import (
    KNOWLEDGE_ENTRY_ENTITY_TYPE,
    KNOWLEDGE_ENTRY_TYPE,
    SchemaDefinition,
)
from knowledge_graph_mcp.schema.relationship_types import REQUIRED_EDGE_TYPES


class BootstrapStatus(str, Enum):
    """Outcome of a bootstrap check."""

    ALREADY_BOOTSTRAPPED = "already_bootstrapped"
    UPDATED = "updated"
    CREATED = "created"


class BootstrapResult(BaseModel):
    """Bootstrap outcome, with the written schema when a write happened."""

    status: BootstrapStatus
    schema_definition: Optional[SchemaDefinition] = None


class SchemaBootstrapper:
    """
    Idempotent schema bootstrap.

    Schemas are merged additively: types already registered in the workspace,
    including ones unrelated to knowledge entries, are always kept.
    """

    def __init__(self, gateway: GraphGateway):
        self.gateway = gateway

    def ensure(self, workspace_id: str) -> BootstrapResult:
        """
        Ensure the workspace schema has the KnowledgeEntry entity type.

        Args:
            workspace_id: Workspace to bootstrap

        Returns:
            BootstrapResult describing whether the schema was already in
            place, updated, or created
        """
        schema = self.gateway.get_schema(workspace_id)

        if schema is not None and schema.has_entity_type(KNOWLEDGE_ENTRY_TYPE):
            logger.debug(f"Knowledge schema already bootstrapped for workspace {workspace_id}")
            return BootstrapResult(status=BootstrapStatus.ALREADY_BOOTSTRAPPED)

        if schema is not None:
            existing_edge_names = set(schema.edge_type_names())
            missing_edge_types = [
                edge_type for edge_type in REQUIRED_EDGE_TYPES if edge_type.name not in existing_edge_names
            ]
            updated = self.gateway.upsert_schema(
                workspace_id,
                schema.entity_types + [KNOWLEDGE_ENTRY_ENTITY_TYPE],
                schema.edge_types + missing_edge_types,
            )
            logger.info(
                f"Added {KNOWLEDGE_ENTRY_TYPE} to schema of workspace {workspace_id} "
                f"(version {updated.version})"
            )
            return BootstrapResult(status=BootstrapStatus.UPDATED, schema_definition=updated)

        created = self.gateway.upsert_schema(
            workspace_id,
            [KNOWLEDGE_ENTRY_ENTITY_TYPE],
            list(REQUIRED_EDGE_TYPES),
        )
        logger.info(f"Created knowledge schema for workspace {workspace_id}")
        return BootstrapResult(status=BootstrapStatus.CREATED, schema_definition=created)
