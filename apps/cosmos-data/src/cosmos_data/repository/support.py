"""Helpers shared by the repository implementations."""

import typing

from pydantic import BaseModel

from cosmos_data.core.query.criteria import Criteria
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.exceptions import ConfigurationError


def resolve_entity_class(repository_class: type, explicit: type[BaseModel] | None = None) -> type[BaseModel]:
    """Entity class of a repository.

    Taken from the explicit argument, an ``entity_class`` class attribute or
    the generic base, e.g. ``class UserRepository(SimpleCosmosRepository[User])``.

    Raises:
        ConfigurationError: If no entity class can be determined
    """
    if explicit is not None:
        return explicit
    declared = getattr(repository_class, "entity_class", None)
    if isinstance(declared, type) and issubclass(declared, BaseModel):
        return declared
    for cls in repository_class.__mro__:
        for base in getattr(cls, "__orig_bases__", ()):
            for arg in typing.get_args(base):
                if isinstance(arg, type) and issubclass(arg, BaseModel):
                    return arg
    raise ConfigurationError(f"Cannot determine the entity class of {repository_class.__name__}")


def as_query(query: DocumentQuery | Criteria) -> DocumentQuery:
    if isinstance(query, Criteria):
        return DocumentQuery(criteria=query)
    return query
