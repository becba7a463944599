"""
Entity codec for Knowledge Graph MCP.

Translates between the gateway's generic Entity property bag and the
KnowledgeEntry domain record. List-valued domain fields are stored as
JSON-encoded arrays, since graph properties are flat strings.
"""

import json
from datetime import datetime
from typing import Dict, Any, List, Mapping, Optional, Union

from pydantic import ValidationError

from knowledge_graph_mcp.errors import EntityDecodeError
from knowledge_graph_mcp.schema.entity_types import (
    KNOWLEDGE_ENTRY_TYPE,
    LIST_FIELDS,
    Entity,
    EntityAttrs,
    KnowledgeEntry,
)
from knowledge_graph_mcp.schema.relationship_types import (
    KnowledgeRelationship,
    KnowledgeRelationshipType,
)


class EntityCodec:
    """
    Stateless encoder/decoder between Entity and KnowledgeEntry.

    Both directions are pure functions over in-memory values.
    """

    def to_entity_attrs(self, attrs: Union[Mapping[str, Any], KnowledgeEntry]) -> EntityAttrs:
        """
        Encode domain attributes into gateway entity attributes.

        Args:
            attrs: Domain attributes, or an existing KnowledgeEntry

        Returns:
            EntityAttrs of type ``KnowledgeEntry``
        """
        if isinstance(attrs, KnowledgeEntry):
            attrs = attrs.model_dump()

        properties: Dict[str, Optional[str]] = {
            "title": attrs.get("title"),
            "body": attrs.get("body"),
            "category": attrs.get("category"),
        }
        for field in LIST_FIELDS:
            properties[field] = json.dumps(list(attrs.get(field) or []))
        properties["last_verified_at"] = self._encode_timestamp(attrs.get("last_verified_at"))

        return EntityAttrs(type=KNOWLEDGE_ENTRY_TYPE, properties=properties)

    def to_knowledge_entry(self, entity: Entity) -> KnowledgeEntry:
        """
        Decode a gateway entity into a KnowledgeEntry.

        Args:
            entity: Entity of type ``KnowledgeEntry``

        Returns:
            KnowledgeEntry domain record

        Raises:
            EntityDecodeError: If the entity has another type or a list
                property does not hold a JSON array, or a property has the
                wrong type for KnowledgeEntry
        """
        if entity.type != KNOWLEDGE_ENTRY_TYPE:
            raise EntityDecodeError(
                entity.id, f"Entity {entity.id} has type {entity.type}, expected {KNOWLEDGE_ENTRY_TYPE}"
            )

        props = entity.properties
        decoded = {field: self._decode_list(entity.id, field, props.get(field)) for field in LIST_FIELDS}

        try:
            return KnowledgeEntry(
                id=entity.id,
                workspace_id=entity.workspace_id,
                title=props.get("title") or "",
                body=props.get("body") or "",
                category=props.get("category") or "",
                last_verified_at=props.get("last_verified_at"),
                created_at=entity.created_at,
                updated_at=entity.updated_at,
                **decoded,
            )
        except ValidationError as e:
            raise EntityDecodeError(entity.id, f"Entity {entity.id} does not match KnowledgeEntry: {e}") from e

    def to_relationship(self, source_id: str, neighbor: Entity) -> KnowledgeRelationship:
        """Derive a relationship from an entry to one of its neighbors."""
        return KnowledgeRelationship(
            from_id=source_id,
            to_id=neighbor.id,
            type=KnowledgeRelationshipType.RELATES_TO.value,
        )

    @staticmethod
    def _encode_timestamp(value: Any) -> Optional[str]:
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    @staticmethod
    def _decode_list(entity_id: str, field: str, raw: Any) -> List[Any]:
        if raw is None:
            return []
        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise EntityDecodeError(entity_id, f"Malformed JSON in {field} of entity {entity_id}: {e}") from e
        if not isinstance(value, list):
            raise EntityDecodeError(entity_id, f"Property {field} of entity {entity_id} is not a JSON array")
        return value
