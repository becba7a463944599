"""
Schema definition modules for Knowledge Graph MCP.

This package contains the graph schema and domain models for knowledge
entries and their relationships, the codec translating between them, and
the validation policy applied before anything is written.
"""
