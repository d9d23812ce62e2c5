"""Core types shared by every toolstream layer."""

from .errors import (
    BackendListFailure,
    ConfigError,
    DispatchFailure,
    InvalidStateTransition,
    InvalidToolName,
    SchemaSanitationConflict,
    ToolstreamError,
    Unclassifiable,
)
from .protocols import BackendSession, CredentialProvider, DatasetLabeler
from .records import as_mapping, get_field

__all__ = [
    "ToolstreamError",
    "Unclassifiable",
    "InvalidToolName",
    "InvalidStateTransition",
    "BackendListFailure",
    "DispatchFailure",
    "SchemaSanitationConflict",
    "ConfigError",
    "BackendSession",
    "CredentialProvider",
    "DatasetLabeler",
    "as_mapping",
    "get_field",
]
