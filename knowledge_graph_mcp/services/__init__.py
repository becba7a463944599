"""
Knowledge graph use cases.

Each service is a stateless pipeline: validate, bootstrap or verify,
delegate to the graph gateway, convert the result.
"""

from knowledge_graph_mcp.services.bootstrap import SchemaBootstrapper
from knowledge_graph_mcp.services.knowledge_entries import KnowledgeEntryService
from knowledge_graph_mcp.services.relationships import KnowledgeRelationshipService
from knowledge_graph_mcp.services.traversal import GraphTraversalService

__all__ = [
    "SchemaBootstrapper",
    "KnowledgeEntryService",
    "KnowledgeRelationshipService",
    "GraphTraversalService",
]
