"""Exceptions raised by the Cosmos DB persistence layer."""

from azure.cosmos.exceptions import CosmosHttpResponseError


class CosmosDataError(Exception):
    """Base class for all persistence errors."""


class ConfigurationError(CosmosDataError, ValueError):
    """Invalid entity mapping or connection configuration."""


class IllegalQueryError(CosmosDataError):
    """Criteria, property name or derived query cannot be translated."""


class DatabaseCreationError(CosmosDataError):
    """Database or container could not be created."""


class CosmosAccessError(CosmosDataError):
    """A Cosmos DB request failed.

    Attributes:
        status_code: HTTP status code reported by the service, if any
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DocumentAlreadyExistsError(CosmosAccessError):
    """Insert conflicted with an existing document (409)."""


class OptimisticLockingError(CosmosAccessError):
    """The document etag no longer matches (412)."""


class ThrottledError(CosmosAccessError):
    """Request rate too large (429)."""


_STATUS_ERRORS: dict[int, type[CosmosAccessError]] = {
    409: DocumentAlreadyExistsError,
    412: OptimisticLockingError,
    429: ThrottledError,
}


def translate_cosmos_error(error: CosmosHttpResponseError, message: str) -> CosmosAccessError:
    """Map an SDK error to the matching persistence error.

    Args:
        error: Error raised by the azure-cosmos SDK
        message: Context describing the failed operation

    Returns:
        CosmosAccessError subclass chosen by status code. The caller raises it.
    """
    status_code = getattr(error, "status_code", None)
    error_cls = _STATUS_ERRORS.get(status_code, CosmosAccessError)
    return error_cls(f"{message}: {getattr(error, 'message', error)}", status_code)
