"""
Postman document parser.

Turns raw text into a JSON object, strips the wrapper the Postman API puts
around exported documents, and classifies the result as a collection or an
environment.
"""

import json
from typing import Any, Dict, Optional

from ..utils.constants import (
    POSTMAN_SCHEMA_URLS_V2_0,
    POSTMAN_SCHEMA_URLS_V2_1,
    POSTMAN_ENVIRONMENT_SCOPES,
)
from ..utils.exceptions import CollectionParsingError, UnsupportedSchemaError

COLLECTION = 'collection'
ENVIRONMENT = 'environment'


def parse_document(raw_text: str) -> Dict[str, Any]:
    """
    Parse raw Postman export text.

    Args:
        raw_text: File contents (after optional preprocessing)

    Returns:
        The document object with any API wrapper removed

    Raises:
        CollectionParsingError: If the text is not JSON or not a JSON object
    """
    try:
        document = json.loads(raw_text)
    except (json.JSONDecodeError, TypeError) as e:
        raise CollectionParsingError(f"Invalid JSON: {e}")

    if not isinstance(document, dict):
        raise CollectionParsingError(f"Expected a JSON object, got {type(document).__name__}")

    return unwrap_api_export(document)


def unwrap_api_export(document: Dict[str, Any]) -> Dict[str, Any]:
    """Remove the {"collection": ...} / {"environment": ...} envelope."""
    if len(document) == 1:
        for key in (COLLECTION, ENVIRONMENT):
            inner = document.get(key)
            if isinstance(inner, dict):
                return inner
    return document


def is_postman_environment(document: Dict[str, Any]) -> bool:
    return (document.get('_postman_variable_scope') in POSTMAN_ENVIRONMENT_SCOPES
            and isinstance(document.get('values'), list))


def is_postman_collection(document: Dict[str, Any]) -> bool:
    info = document.get('info')
    return isinstance(info, dict) and bool(info.get('schema')) and isinstance(document.get('item'), list)


def detect_document_type(document: Dict[str, Any]) -> str:
    """
    Classify a parsed document.

    Returns:
        'environment' or 'collection'

    Raises:
        UnsupportedSchemaError: If the document is neither
    """
    if is_postman_environment(document):
        return ENVIRONMENT
    if is_postman_collection(document):
        return COLLECTION
    raise UnsupportedSchemaError("Unknown file format: not a Postman collection or environment")


def schema_version(collection: Dict[str, Any]) -> Optional[str]:
    """Return '2.0' or '2.1' for a recognised schema URL, otherwise None."""
    info = collection.get('info')
    schema = info.get('schema') if isinstance(info, dict) else None
    if schema in POSTMAN_SCHEMA_URLS_V2_0:
        return '2.0'
    if schema in POSTMAN_SCHEMA_URLS_V2_1:
        return '2.1'
    return None
