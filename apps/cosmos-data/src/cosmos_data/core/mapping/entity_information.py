"""Entity metadata derived from model fields and document settings."""

import logging
from functools import lru_cache
from typing import Any, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from cosmos_data.core.mapping.document import DocumentSettings, IndexingPolicy, get_document_settings
from cosmos_data.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ID_PROPERTY = "id"
ETAG_PROPERTY = "_etag"


class CosmosEntityInformation[T: BaseModel]:
    """Resolved mapping information for one entity class."""

    def __init__(self, entity_class: type[T]) -> None:
        """Resolve mapping information.

        Args:
            entity_class: Pydantic model class, optionally decorated with ``cosmos_document``

        Raises:
            ConfigurationError: If the id, partition key or version field does not exist
        """
        if entity_class is None:
            raise ValueError("entity_class must not be None")

        self.entity_class = entity_class
        self.settings: DocumentSettings = get_document_settings(entity_class)
        self._fields = entity_class.model_fields

        self.container_name = self.settings.container or entity_class.__name__
        self.id_field = self._resolve_id_field()
        self.version_field = self._resolve_optional_field(self.settings.version_field, "version_field")
        self.partition_key_field = self._resolve_optional_field(self.settings.partition_key, "partition_key")

    def _resolve_id_field(self) -> str:
        if self.settings.id_field:
            return self._require_field(self.settings.id_field, "id_field")
        if ID_PROPERTY in self._fields:
            return ID_PROPERTY
        for name, info in self._fields.items():
            if info.alias == ID_PROPERTY:
                return name
        raise ConfigurationError(f"{self.entity_class.__name__} has no 'id' field and no id_field was declared")

    def _resolve_optional_field(self, name: str | None, option: str) -> str | None:
        if name is None:
            return None
        return self._require_field(name, option)

    def _require_field(self, name: str, option: str) -> str:
        field_name = self.field_name(name)
        if field_name is None:
            raise ConfigurationError(f"{option} '{name}' is not a field of {self.entity_class.__name__}")
        return field_name

    def field_name(self, name: str) -> str | None:
        """Python field name for a field name or alias, None when unknown."""
        return _lookup(self._fields, name)

    def property_name(self, name: str) -> str:
        """Document property for a field name or alias.

        Unknown names are returned unchanged so properties outside the
        model can still be queried.
        """
        field_name = self.field_name(name)
        if field_name is None:
            return name
        if field_name == self.id_field:
            return ID_PROPERTY
        if field_name == self.version_field:
            return ETAG_PROPERTY
        return self._fields[field_name].alias or field_name

    def document_path(self, subject: str) -> str:
        """Document path for a dotted field path.

        Each segment is mapped through the aliases of the model it belongs
        to, so ``addresses.postal_code`` becomes ``addresses.postalCode``.
        Segments that are not model fields are kept as written.
        """
        head, *rest = subject.split(".")
        segments = [self.property_name(head)]
        field_name = self.field_name(head)
        model = _nested_model(self._fields[field_name]) if field_name else None
        for segment in rest:
            fields = model.model_fields if model is not None else {}
            name = _lookup(fields, segment)
            if name is None:
                segments.append(segment)
                model = None
                continue
            segments.append(fields[name].alias or name)
            model = _nested_model(fields[name])
        return ".".join(segments)

    @property
    def id_property(self) -> str:
        return ID_PROPERTY

    @property
    def partition_key_property(self) -> str:
        if self.partition_key_field is None:
            return ID_PROPERTY
        return self.property_name(self.partition_key_field)

    @property
    def partition_key_path(self) -> str:
        return f"/{self.partition_key_property}"

    @property
    def request_units(self) -> int:
        return self.settings.ru

    @property
    def time_to_live(self) -> int | None:
        return self.settings.time_to_live

    @property
    def auto_create_container(self) -> bool:
        return self.settings.auto_create_container

    @property
    def auto_generate_id(self) -> bool:
        return self.settings.auto_generate_id

    @property
    def indexing_policy(self) -> IndexingPolicy | None:
        return self.settings.indexing_policy

    def get_id(self, entity: T) -> Any:
        return getattr(entity, self.id_field)

    def get_partition_key_value(self, entity: T) -> Any:
        """Partition key value of ``entity``; the id when no partition key is declared."""
        if self.partition_key_field is None:
            return self.get_id(entity)
        return getattr(entity, self.partition_key_field)

    def get_version(self, entity: T) -> str | None:
        if self.version_field is None:
            return None
        return getattr(entity, self.version_field)

    def is_new(self, entity: T) -> bool:
        return self.get_id(entity) in (None, "")

    def is_versioned(self) -> bool:
        return self.version_field is not None


def _lookup(fields: dict[str, FieldInfo], name: str) -> str | None:
    if name in fields:
        return name
    for field_name, info in fields.items():
        if info.alias == name:
            return field_name
    return None


def _nested_model(field: FieldInfo) -> type[BaseModel] | None:
    """Model class inside a field annotation such as ``list[Address] | None``."""
    candidates = [field.annotation]
    while candidates:
        annotation = candidates.pop()
        if get_origin(annotation) is None and isinstance(annotation, type) and issubclass(annotation, BaseModel):
            return annotation
        candidates.extend(get_args(annotation))
    return None


@lru_cache(maxsize=None)
def get_entity_information[T: BaseModel](entity_class: type[T]) -> CosmosEntityInformation[T]:
    """Cached entity information for ``entity_class``."""
    info = CosmosEntityInformation(entity_class)
    logger.debug(
        "Mapped %s to container '%s' (partition key %s)",
        entity_class.__name__,
        info.container_name,
        info.partition_key_path,
    )
    return info
