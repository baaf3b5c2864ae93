"""
Parsers for Postman documents and template strings.
"""

from .postman_parser import parse_document, detect_document_type, schema_version
from .variables import transform_postman_to_nunjucks, transform_variable_name

__all__ = [
    "parse_document",
    "detect_document_type",
    "schema_version",
    "transform_postman_to_nunjucks",
    "transform_variable_name",
]
