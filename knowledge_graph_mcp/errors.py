"""
Error types for Knowledge Graph MCP.

Every error raised by the knowledge services carries a machine-readable
``reason`` so the transport layer can render it as a tagged result.
"""

from enum import Enum
from typing import Optional


class ErrorReason(str, Enum):
    """Machine-readable failure reasons."""

    TITLE_REQUIRED = "title_required"
    TITLE_TOO_LONG = "title_too_long"
    BODY_REQUIRED = "body_required"
    INVALID_CATEGORY = "invalid_category"
    TOO_MANY_TAGS = "too_many_tags"
    INVALID_TAG = "invalid_tag"
    INVALID_FILE_PATH = "invalid_file_path"
    INVALID_TIMESTAMP = "invalid_timestamp"
    MISSING_REQUIRED_PARAM = "missing_required_param"
    INVALID_RELATIONSHIP_TYPE = "invalid_relationship_type"
    SELF_REFERENCE = "self_reference"
    NOT_FOUND = "not_found"
    DECODE_FAILED = "decode_failed"


class KnowledgeGraphError(Exception):
    """Base class for all knowledge graph errors."""

    reason: ErrorReason

    def __init__(self, reason: ErrorReason, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or reason.value)


class KnowledgeValidationError(KnowledgeGraphError, ValueError):
    """Input rejected before any gateway call was made."""


class EntityNotFoundError(KnowledgeGraphError):
    """The requested entity does not exist in the workspace."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(ErrorReason.NOT_FOUND, f"Entity {entity_id} does not exist")


class EntityDecodeError(KnowledgeGraphError, ValueError):
    """
    A stored entity could not be converted into a domain record.

    This signals corrupted data written by another client; it is never
    recovered from by substituting defaults.
    """

    def __init__(self, entity_id: Optional[str], message: str):
        self.entity_id = entity_id
        super().__init__(ErrorReason.DECODE_FAILED, message)
