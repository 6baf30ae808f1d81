"""Conversion between pydantic entities and Cosmos DB documents."""

import logging
import uuid
from typing import Any

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from cosmos_data.core.mapping.entity_information import (
    ETAG_PROPERTY,
    ID_PROPERTY,
    CosmosEntityInformation,
    get_entity_information,
)

logger = logging.getLogger(__name__)

# Cosmos DB system properties that are not part of the model
COSMOS_SYSTEM_FIELDS = frozenset({"_rid", "_self", "_attachments", "_ts"})


class MappingCosmosConverter:
    """Maps entities to JSON documents and back."""

    @staticmethod
    def _document_key(info: CosmosEntityInformation, field_name: str) -> str:
        """Key of ``field_name`` in a by-alias dump."""
        return info.entity_class.model_fields[field_name].alias or field_name

    def write[T: BaseModel](self, entity: T) -> dict[str, Any]:
        """Convert an entity to a document.

        Args:
            entity: Entity to convert

        Returns:
            JSON-compatible document with the id under "id"
        """
        if entity is None:
            raise ValueError("entity must not be None")

        info = get_entity_information(type(entity))
        document = entity.model_dump(mode="json", by_alias=True)

        id_value = document.pop(self._document_key(info, info.id_field), None)
        if id_value in (None, "") and info.auto_generate_id:
            id_value = str(uuid.uuid4())
            logger.debug("Generated id %s for new %s", id_value, info.entity_class.__name__)
        if id_value is not None:
            document[ID_PROPERTY] = str(id_value)

        if info.version_field is not None:
            etag = document.pop(self._document_key(info, info.version_field), None)
            if etag is not None:
                document[ETAG_PROPERTY] = etag

        return document

    def read[T: BaseModel](self, entity_class: type[T], document: dict[str, Any] | None) -> T | None:
        """Convert a document to an entity.

        Args:
            entity_class: Target model class
            document: Document as returned by the SDK

        Returns:
            Entity instance, or None when document is None
        """
        if document is None:
            return None

        info = get_entity_information(entity_class)
        data = {k: v for k, v in document.items() if k not in COSMOS_SYSTEM_FIELDS and k != ETAG_PROPERTY}

        if ID_PROPERTY in data:
            id_key = self._document_key(info, info.id_field)
            data[id_key] = data.pop(ID_PROPERTY)

        if info.version_field is not None:
            data[self._document_key(info, info.version_field)] = document.get(ETAG_PROPERTY)

        return entity_class.model_validate(data)

    def to_document_value(self, value: Any) -> Any:
        """Convert a query parameter to its document representation."""
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", by_alias=True)
        return to_jsonable_python(value)
