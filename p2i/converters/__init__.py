"""
Converter modules for postman2insomnia.

This module contains the collection importer, the environment converter,
the v5 document builder and the batch orchestrator.
"""

from .postman_importer import PostmanImporter, convert
from .environment import convert_environment
from .insomnia_document import build_document, write_document
from .batch import BatchConverter, ConversionResult

__all__ = [
    "PostmanImporter",
    "convert",
    "convert_environment",
    "build_document",
    "write_document",
    "BatchConverter",
    "ConversionResult",
]
