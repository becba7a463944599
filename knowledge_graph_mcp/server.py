"""
Knowledge Graph MCP Server

This is the Model Context Protocol server for the Knowledge Graph MCP. It exposes
the knowledge entry, relationship and traversal use cases as MCP tools for AI
agents, scoped by workspace, and mounts them on a FastAPI app with health checks.
"""

import asyncio
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Dict, List, Optional, Any

from fastapi import FastAPI
from loguru import logger
from mcp.server.fastmcp import FastMCP

from knowledge_graph_mcp.config import get_settings
from knowledge_graph_mcp.db.gateway import GraphGateway
from knowledge_graph_mcp.db.in_memory_gateway import InMemoryGraphGateway
from knowledge_graph_mcp.db.neo4j_gateway import Neo4jGraphGateway
from knowledge_graph_mcp.errors import KnowledgeGraphError
from knowledge_graph_mcp.schema.entity_types import KnowledgeEntry
from knowledge_graph_mcp.services import (
    GraphTraversalService,
    KnowledgeEntryService,
    KnowledgeRelationshipService,
    SchemaBootstrapper,
)

settings = get_settings()


@lru_cache()
def get_gateway() -> GraphGateway:
    """
    Get the graph gateway for the configured backend.

    Returns:
        Shared GraphGateway instance
    """
    if settings.graph_backend == "memory":
        logger.warning("Using in-memory graph backend; data is lost on restart")
        return InMemoryGraphGateway()

    return Neo4jGraphGateway(
        uri=settings.neo4j_uri,
        user=settings.neo4j_user,
        password=settings.neo4j_password,
        database=settings.neo4j_database,
    )


def _failure(error: KnowledgeGraphError) -> Dict[str, Any]:
    logger.warning(f"Knowledge tool failed: {error.reason.value}: {error}")
    return {
        "success": False,
        "error": error.reason.value,
        "message": str(error),
    }


def _summary(entry: KnowledgeEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "title": entry.title,
        "category": entry.category,
        "tags": entry.tags,
        "snippet": entry.snippet(),
    }


mcp_server = FastMCP(
    "knowledge-graph",
    instructions=(
        "Workspace knowledge base. Entries are connected by typed relationships "
        "(relates_to, depends_on, prerequisite_for, example_of, part_of, supersedes)."
    ),
)


@mcp_server.tool()
async def bootstrap_knowledge_schema(workspace_id: str) -> Dict[str, Any]:
    """
    Ensure the workspace graph schema supports knowledge entries.

    Args:
        workspace_id: Workspace identifier

    Returns:
        Dict with the bootstrap status and schema version when it changed
    """
    result = await asyncio.to_thread(SchemaBootstrapper(get_gateway()).ensure, workspace_id)
    response: Dict[str, Any] = {"success": True, "status": result.status.value}
    if result.schema_definition is not None:
        response["schema_version"] = result.schema_definition.version
    return response


@mcp_server.tool()
async def create_knowledge_entry(
    workspace_id: str,
    title: str,
    body: str,
    category: str,
    tags: Optional[List[str]] = None,
    code_snippets: Optional[List[Any]] = None,
    file_paths: Optional[List[str]] = None,
    external_links: Optional[List[Any]] = None,
    last_verified_at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a knowledge entry in the workspace.

    Args:
        workspace_id: Workspace identifier
        title: Entry title (at most 255 characters)
        body: Markdown body
        category: One of how_to, pattern, convention, architecture_decision,
            gotcha, concept, reference
        tags: Up to 20 tags
        code_snippets: Code snippets illustrating the entry
        file_paths: Repository files the entry is about
        external_links: Links to external documentation
        last_verified_at: ISO timestamp the entry was last checked

    Returns:
        Dict containing the created entry
    """
    attrs = {
        "title": title,
        "body": body,
        "category": category,
        "tags": tags or [],
        "code_snippets": code_snippets or [],
        "file_paths": file_paths or [],
        "external_links": external_links or [],
        "last_verified_at": last_verified_at,
    }
    try:
        entry = await asyncio.to_thread(KnowledgeEntryService(get_gateway()).create, workspace_id, attrs)
    except KnowledgeGraphError as e:
        return _failure(e)

    return {"success": True, "entry": entry.model_dump()}


@mcp_server.tool()
async def get_knowledge_entry(workspace_id: str, entry_id: str) -> Dict[str, Any]:
    """
    Get a knowledge entry and the entries related to it.

    Args:
        workspace_id: Workspace identifier
        entry_id: Entry identifier

    Returns:
        Dict containing the entry and its relationships
    """
    try:
        details = await asyncio.to_thread(KnowledgeEntryService(get_gateway()).get, workspace_id, entry_id)
    except KnowledgeGraphError as e:
        return _failure(e)

    return {
        "success": True,
        "entry": details.entry.model_dump(),
        "relationships": [relationship.model_dump() for relationship in details.relationships],
    }


@mcp_server.tool()
async def traverse_knowledge_graph(
    workspace_id: str,
    start_id: str,
    relationship_type: Optional[str] = None,
    depth: Optional[int] = None,
) -> Dict[str, Any]:
    """
    List the entries reachable from a starting entry.

    Args:
        workspace_id: Workspace identifier
        start_id: Entry to start from
        relationship_type: Only follow edges of this type
        depth: Maximum number of hops, 1 to 5 (default 2)

    Returns:
        Dict containing summaries of the reachable entries
    """
    params = {"start_id": start_id, "relationship_type": relationship_type, "depth": depth}
    try:
        entries = await asyncio.to_thread(GraphTraversalService(get_gateway()).traverse, workspace_id, params)
    except KnowledgeGraphError as e:
        return _failure(e)

    return {
        "success": True,
        "entries": [_summary(entry) for entry in entries],
        "count": len(entries),
    }


@mcp_server.tool()
async def create_knowledge_relationship(
    workspace_id: str,
    from_id: str,
    to_id: str,
    relationship_type: str,
) -> Dict[str, Any]:
    """
    Connect two knowledge entries.

    Args:
        workspace_id: Workspace identifier
        from_id: Source entry
        to_id: Target entry
        relationship_type: One of relates_to, depends_on, prerequisite_for,
            example_of, part_of, supersedes

    Returns:
        Dict containing the created relationship
    """
    attrs = {"from_id": from_id, "to_id": to_id, "type": relationship_type}
    try:
        relationship = await asyncio.to_thread(
            KnowledgeRelationshipService(get_gateway()).create, workspace_id, attrs
        )
    except KnowledgeGraphError as e:
        return _failure(e)

    return {"success": True, "relationship": relationship.model_dump()}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the graph gateway when the app stops."""
    yield
    if get_gateway.cache_info().currsize:
        get_gateway().close()


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Model Context Protocol server for workspace knowledge graphs",
    version=settings.app_version,
    lifespan=lifespan,
)

# Register the MCP server with FastAPI
app.mount("/mcp", mcp_server.sse_app("/mcp"))


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": settings.app_name}


@app.get("/health")
async def health():
    """Health check endpoint with graph backend connectivity test."""
    try:
        db_status = await asyncio.to_thread(get_gateway().check_connection)
        return {
            "status": "ok" if db_status else "error",
            "service": settings.app_name,
            "database": "connected" if db_status else "disconnected",
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return {
            "status": "error",
            "service": settings.app_name,
            "database": "disconnected",
            "error": str(e),
        }


def configure_logging(level: str) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


if __name__ == "__main__":
    import uvicorn

    configure_logging(settings.log_level)
    uvicorn.run(
        "knowledge_graph_mcp.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
