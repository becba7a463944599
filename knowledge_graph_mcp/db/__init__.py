"""
Graph gateway implementations for Knowledge Graph MCP.
"""
