"""
Schema validator for Knowledge Graph MCP.

This module provides the validation policy applied to loosely-typed input
before any graph I/O happens. Rules run in a fixed order and the first
failing rule decides the error.
"""

from datetime import datetime
from typing import Any, Mapping, Optional

from loguru import logger

from knowledge_graph_mcp.errors import ErrorReason, KnowledgeValidationError
from knowledge_graph_mcp.schema.entity_types import (
    KNOWLEDGE_CATEGORIES,
    MAX_TAGS,
    MAX_TITLE_LENGTH,
)
from knowledge_graph_mcp.schema.relationship_types import RELATIONSHIP_TYPES


def valid_category(category: Any) -> bool:
    """Check whether a value is one of the knowledge categories."""
    return isinstance(category, str) and category in KNOWLEDGE_CATEGORIES


def valid_relationship_type(relationship_type: Any) -> bool:
    """Check whether a value is one of the knowledge edge types."""
    return isinstance(relationship_type, str) and relationship_type in RELATIONSHIP_TYPES


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class SchemaValidator:
    """
    Validation policy for knowledge graph input.

    Every method raises KnowledgeValidationError with the reason of the
    first rule that fails, and performs no I/O.
    """

    def validate_entry_attrs(self, attrs: Mapping[str, Any]) -> None:
        """
        Validate attributes for a new knowledge entry.

        Rules run in order: title, body, category, tags, file paths,
        last verification timestamp.

        Args:
            attrs: Entry attributes

        Raises:
            KnowledgeValidationError: On the first failing rule
        """
        title = attrs.get("title")
        if _blank(title) or not isinstance(title, str):
            self._reject(ErrorReason.TITLE_REQUIRED, "Title is required")
        if len(title) > MAX_TITLE_LENGTH:
            self._reject(ErrorReason.TITLE_TOO_LONG, f"Title exceeds {MAX_TITLE_LENGTH} characters")

        body = attrs.get("body")
        if _blank(body) or not isinstance(body, str):
            self._reject(ErrorReason.BODY_REQUIRED, "Body is required")

        category = attrs.get("category")
        if not valid_category(category):
            self._reject(ErrorReason.INVALID_CATEGORY, f"Invalid category: {category!r}")

        self.validate_tags(attrs.get("tags") or [])
        self.validate_file_paths(attrs.get("file_paths") or [])
        self.validate_timestamp(attrs.get("last_verified_at"))

    def validate_file_paths(self, file_paths: Any) -> None:
        """
        Validate a list of repository file paths.

        Raises:
            KnowledgeValidationError: If the value is not a list or a path
                is not a non-blank string
        """
        if not isinstance(file_paths, (list, tuple)):
            self._reject(ErrorReason.INVALID_FILE_PATH, "File paths must be a list of strings")
        for path in file_paths:
            if not isinstance(path, str) or not path.strip():
                self._reject(ErrorReason.INVALID_FILE_PATH, f"Invalid file path: {path!r}")

    def validate_timestamp(self, value: Any) -> None:
        """
        Validate an optional ISO-8601 timestamp.

        Raises:
            KnowledgeValidationError: If the value is neither None, a
                datetime, nor an ISO-8601 string
        """
        if value is None or isinstance(value, datetime):
            return
        if isinstance(value, str):
            try:
                # fromisoformat only accepts a trailing Z from Python 3.11
                datetime.fromisoformat(value.replace("Z", "+00:00"))
                return
            except ValueError:
                pass
        self._reject(ErrorReason.INVALID_TIMESTAMP, f"Invalid timestamp: {value!r}")

    def validate_tags(self, tags: Any) -> None:
        """
        Validate a tag list.

        Raises:
            KnowledgeValidationError: If there are more than MAX_TAGS tags
                or a tag is not a non-blank string
        """
        if not isinstance(tags, (list, tuple)):
            self._reject(ErrorReason.INVALID_TAG, "Tags must be a list of strings")
        if len(tags) > MAX_TAGS:
            self._reject(ErrorReason.TOO_MANY_TAGS, f"At most {MAX_TAGS} tags are allowed, got {len(tags)}")
        for tag in tags:
            if not isinstance(tag, str) or not tag.strip():
                self._reject(ErrorReason.INVALID_TAG, f"Invalid tag: {tag!r}")

    def validate_traversal_params(self, params: Mapping[str, Any]) -> None:
        """
        Validate traversal parameters.

        Depth is not validated here: out-of-range depths are clamped by the
        traversal service, never rejected.

        Raises:
            KnowledgeValidationError: If ``start_id`` is missing or the
                relationship type is unknown
        """
        if _blank(params.get("start_id")):
            self._reject(ErrorReason.MISSING_REQUIRED_PARAM, "start_id is required")

        relationship_type = params.get("relationship_type")
        if relationship_type is not None and not valid_relationship_type(relationship_type):
            self._reject(
                ErrorReason.INVALID_RELATIONSHIP_TYPE,
                f"Invalid relationship type: {relationship_type!r}",
            )

    def validate_relationship_attrs(self, attrs: Mapping[str, Any]) -> None:
        """
        Validate attributes for a new relationship between two entries.

        Raises:
            KnowledgeValidationError: If an endpoint is missing, the type is
                unknown, or the relationship points at its own source
        """
        from_id = attrs.get("from_id")
        to_id = attrs.get("to_id")
        if _blank(from_id) or _blank(to_id):
            self._reject(ErrorReason.MISSING_REQUIRED_PARAM, "from_id and to_id are required")

        relationship_type = attrs.get("type")
        if not valid_relationship_type(relationship_type):
            self._reject(
                ErrorReason.INVALID_RELATIONSHIP_TYPE,
                f"Invalid relationship type: {relationship_type!r}",
            )

        if from_id == to_id:
            self._reject(ErrorReason.SELF_REFERENCE, "An entry cannot relate to itself")

    @staticmethod
    def _reject(reason: ErrorReason, message: Optional[str] = None) -> None:
        logger.warning(f"Validation failed ({reason.value}): {message}")
        raise KnowledgeValidationError(reason, message)
