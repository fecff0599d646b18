"""
DLP CLI - Three-layer client for Cloud DLP stored infoTypes.

Layers:
- core: Raw types and HTTP client
- sdk: StoredInfoTypeClient returning Result values
- cli: Command-line interface and console formatting
"""

from dlp_cli.sdk import StoredInfoTypeClient

__version__ = "0.1.0"
__all__ = ["StoredInfoTypeClient"]
