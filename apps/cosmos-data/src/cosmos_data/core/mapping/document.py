"""Container settings attached to entity models."""

from collections.abc import Callable
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DOCUMENT_SETTINGS_ATTR = "__cosmos_document__"

MIN_REQUEST_UNITS = 400
DEFAULT_REQUEST_UNITS = MIN_REQUEST_UNITS

M = TypeVar("M", bound=type[BaseModel])


class IndexingPolicy(BaseModel):
    """Container indexing policy."""

    automatic: bool = True
    indexing_mode: Literal["consistent", "none"] = "consistent"
    included_paths: tuple[str, ...] = ("/*",)
    excluded_paths: tuple[str, ...] = ('/"_etag"/?',)

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict[str, Any]:
        """Render in the shape expected by ``create_container``."""
        return {
            "automatic": self.automatic,
            "indexingMode": self.indexing_mode,
            "includedPaths": [{"path": path} for path in self.included_paths],
            "excludedPaths": [{"path": path} for path in self.excluded_paths],
        }


class DocumentSettings(BaseModel):
    """Mapping options declared with :func:`cosmos_document`."""

    container: str | None = Field(default=None, min_length=1)
    partition_key: str | None = None
    id_field: str | None = None
    version_field: str | None = None
    ru: int = Field(default=DEFAULT_REQUEST_UNITS, ge=MIN_REQUEST_UNITS)
    time_to_live: int | None = Field(default=None, ge=-1)
    auto_create_container: bool = True
    auto_generate_id: bool = False
    indexing_policy: IndexingPolicy | None = None

    model_config = ConfigDict(frozen=True)


def cosmos_document(
    container: str | None = None,
    *,
    partition_key: str | None = None,
    id_field: str | None = None,
    version_field: str | None = None,
    ru: int = DEFAULT_REQUEST_UNITS,
    time_to_live: int | None = None,
    auto_create_container: bool = True,
    auto_generate_id: bool = False,
    indexing_policy: IndexingPolicy | None = None,
) -> Callable[[M], M]:
    """Declare how a pydantic model is stored.

    Args:
        container: Container name (defaults to the class name)
        partition_key: Field holding the partition key (defaults to the id, path "/id")
        id_field: Field mapped to the document "id" (defaults to a field named "id")
        version_field: Field receiving the document "_etag" for optimistic locking
        ru: Provisioned throughput used when the container is created
        time_to_live: Default TTL in seconds (-1 keeps items forever, None disables TTL)
        auto_create_container: Create the container when a repository is built
        auto_generate_id: Assign a UUID4 string to empty ids on write
        indexing_policy: Indexing policy used when the container is created

    Returns:
        Class decorator

    Raises:
        ValidationError: If ru is below 400 or time_to_live below -1

    Example:
        @cosmos_document(container="people", partition_key="last_name")
        class Person(BaseModel):
            id: str
            last_name: str = Field(alias="lastName")
    """
    settings = DocumentSettings(
        container=container,
        partition_key=partition_key,
        id_field=id_field,
        version_field=version_field,
        ru=ru,
        time_to_live=time_to_live,
        auto_create_container=auto_create_container,
        auto_generate_id=auto_generate_id,
        indexing_policy=indexing_policy,
    )

    def decorator(cls: M) -> M:
        setattr(cls, DOCUMENT_SETTINGS_ATTR, settings)
        return cls

    return decorator


def get_document_settings(entity_class: type[BaseModel]) -> DocumentSettings:
    """Settings declared on ``entity_class``, or defaults when undecorated."""
    # Only the class itself counts, subclasses map to their own container
    return entity_class.__dict__.get(DOCUMENT_SETTINGS_ATTR) or DocumentSettings()
