"""
Utility modules for postman2insomnia.

This module contains constants, exceptions, and the trace logger
used throughout the application.
"""

from .constants import *
from .exceptions import *

__all__ = [
    # Constants
    "POSTMAN_SCHEMA_URLS_V2_0",
    "POSTMAN_SCHEMA_URLS_V2_1",
    "WORKSPACE_ID_SENTINEL",
    "ID_PREFIXES",
    "ID_PATTERN",
    "CONTENT_TYPES",
    "DEFAULT_CONFIG_PATH",
    "OUTPUT_FORMATS",
    "MAX_FIXPOINT_PASSES",
    # Exceptions
    "P2IError",
    "ConfigurationError",
    "CollectionParsingError",
    "UnsupportedSchemaError",
    "ValidationError",
]
