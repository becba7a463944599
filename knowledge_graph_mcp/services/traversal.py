"""
Knowledge graph traversal for Knowledge Graph MCP.

Walks outward from a knowledge entry, optionally following a single edge
type, within a bounded number of hops.
"""

from typing import Any, List, Mapping, Optional

from loguru import logger

from knowledge_graph_mcp.db.gateway import GraphGateway
from knowledge_graph_mcp.errors import EntityNotFoundError
from knowledge_graph_mcp.schema.codec import EntityCodec
from knowledge_graph_mcp.schema.entity_types import KNOWLEDGE_ENTRY_TYPE, KnowledgeEntry
from knowledge_graph_mcp.schema.validator import SchemaValidator

DEFAULT_DEPTH = 2
MIN_DEPTH = 1
MAX_DEPTH = 5


def resolve_depth(depth: Any) -> int:
    """
    Turn a requested depth into the depth actually traversed.

    A missing depth gives DEFAULT_DEPTH. Anything else is clamped into
    [MIN_DEPTH, MAX_DEPTH] rather than rejected, so a caller asking for 100
    hops, or infinitely many, gets MAX_DEPTH. Numeric strings are accepted;
    values that are not numbers at all fall back to the default.
    """
    if depth is None or isinstance(depth, bool):
        return DEFAULT_DEPTH
    try:
        depth = int(depth)
    except OverflowError:
        return MAX_DEPTH if depth > 0 else MIN_DEPTH
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-numeric traversal depth {depth!r}")
        return DEFAULT_DEPTH
    return max(MIN_DEPTH, min(MAX_DEPTH, depth))


class GraphTraversalService:
    """Depth-bounded, type-filtered traversal over knowledge entries."""

    def __init__(
        self,
        gateway: GraphGateway,
        codec: Optional[EntityCodec] = None,
        validator: Optional[SchemaValidator] = None,
    ):
        self.gateway = gateway
        self.codec = codec or EntityCodec()
        self.validator = validator or SchemaValidator()

    def traverse(self, workspace_id: str, params: Mapping[str, Any]) -> List[KnowledgeEntry]:
        """
        Traverse the knowledge graph from a starting entry.

        Args:
            workspace_id: Owning workspace
            params: ``start_id`` (required), ``relationship_type`` and
                ``depth`` (optional)

        Returns:
            Reachable knowledge entries in the order the gateway returned
            them, the starting entry excluded

        Raises:
            KnowledgeValidationError: If ``start_id`` is missing or the
                relationship type is unknown
            EntityNotFoundError: If the starting entry does not exist
        """
        self.validator.validate_traversal_params(params)

        start_id = params["start_id"]
        relationship_type = params.get("relationship_type")
        depth = resolve_depth(params.get("depth"))

        if self.gateway.get_entity(workspace_id, start_id) is None:
            raise EntityNotFoundError(start_id)

        entities = self.gateway.traverse(workspace_id, start_id, depth, relationship_type)
        logger.debug(
            f"Traversal from {start_id} (depth {depth}, edge type {relationship_type}) "
            f"reached {len(entities)} entities"
        )

        # Other entity types can share the workspace graph; only entries are returned
        return [
            self.codec.to_knowledge_entry(entity)
            for entity in entities
            if entity.type == KNOWLEDGE_ENTRY_TYPE
        ]
