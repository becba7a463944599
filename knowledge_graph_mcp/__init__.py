"""
Knowledge Graph MCP.

Schema-governed knowledge base for workspace AI agents, stored in a
property graph and exposed as Model Context Protocol tools.
"""

__version__ = "0.1.0"
