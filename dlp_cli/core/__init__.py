"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses for stored infoType requests and responses
- Low-level HTTP client with auth and error handling
"""

from dlp_cli.core.client import APIError, DlpApiClient, ServiceError, ValidationError
from dlp_cli.core.types import (
    DictionarySource,
    FileSetSource,
    Result,
    StoredInfoType,
    StoredInfoTypeConfig,
    StoredInfoTypeState,
    StoredInfoTypeVersion,
    TableSource,
)

__all__ = [
    "APIError",
    "DictionarySource",
    "DlpApiClient",
    "FileSetSource",
    "Result",
    "ServiceError",
    "StoredInfoType",
    "StoredInfoTypeConfig",
    "StoredInfoTypeState",
    "StoredInfoTypeVersion",
    "TableSource",
    "ValidationError",
]
