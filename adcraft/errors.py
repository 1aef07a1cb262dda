"""
Custom domain exceptions for the data layer.
Every error has a name, not chaos.
"""


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


class StorageError(Exception):
    """Raised by a storage backend when a read or write fails."""
    pass


class SerializationError(StorageError):
    """Raised when a collection cannot be encoded or decoded."""
    pass


class DataContractError(Exception):
    """Raised when data doesn't conform to the Product/Avatar schema."""
    pass


class NormalizationError(Exception):
    """Raised when a raw webhook payload cannot be normalized."""
    pass


class EventBusError(Exception):
    """Raised on misuse of the event bus (unknown topic, bad callback)."""
    pass


class NetworkError(Exception):
    """Base class for network-related failures."""
    pass


class ExternalServiceError(Exception):
    """Raised when an external workflow (webhook) fails."""
    pass


class RetryExhaustedError(ExternalServiceError):
    """Raised when all retry attempts for an external service are exhausted."""
    pass
