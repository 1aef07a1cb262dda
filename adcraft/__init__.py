"""
AdCraft data layer - local product/avatar store with duplicate suppression,
change events and referential integrity tools.
"""

__version__ = "1.0.0"
__author__ = "Engineering Team"

# Export main components for easy import
from adcraft.config import config
from adcraft.logger import logger
from adcraft.errors import (
    ConfigError,
    StorageError,
    SerializationError,
    DataContractError,
    NormalizationError,
    EventBusError,
    NetworkError,
    ExternalServiceError,
    RetryExhaustedError
)

__all__ = [
    'config',
    'logger',
    'ConfigError',
    'StorageError',
    'SerializationError',
    'DataContractError',
    'NormalizationError',
    'EventBusError',
    'NetworkError',
    'ExternalServiceError',
    'RetryExhaustedError'
]
