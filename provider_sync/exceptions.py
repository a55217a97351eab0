"""Exceptions related to provider-sync."""

__all__ = [
    "SyncException",
    "InputException",
    "UnknownProviderError",
    "ClientException",
    "ObjectNotFoundError",
    "ObjectExistsError",
    "AggregateSyncError",
]


class SyncException(Exception):
    """Generic base exception used for this library."""


class InputException(SyncException):
    """Raised when the input files or documents are not formatted as expected."""


class UnknownProviderError(SyncException):
    """Raised when a CAPIProvider names a provider type with no registered template."""

    def __init__(self, resource_name: str, provider_type: str) -> None:
        super().__init__(
            f"CAPIProvider {resource_name} has unknown provider type '{provider_type}'"
        )
        self.resource_name = resource_name
        self.provider_type = provider_type


class ClientException(SyncException):
    """Raised when there is a failure talking to the resource client."""


class ObjectNotFoundError(ClientException):
    """Raised when an object is not found by the resource client."""


class ObjectExistsError(ClientException):
    """Raised when creating an object that already exists."""


class AggregateSyncError(SyncException):
    """Raised when one or more synchronizers failed."""

    def __init__(self, errors: list[Exception]) -> None:
        if len(errors) == 1:
            message = str(errors[0])
        else:
            message = "[" + ", ".join(str(err) for err in errors) + "]"
        super().__init__(message)
        self.errors = errors
