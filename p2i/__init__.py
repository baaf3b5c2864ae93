"""
postman2insomnia - Postman to Insomnia v5 Converter
===================================================

Converts Postman collections (schema v2.0.0 / v2.1.0) and environments
into Insomnia v5 documents, rewriting pm.* scripts to the insomnia.* API.

Components:
- Schema-polymorphic collection importer
- Authentication resolver (explicit auth or Authorization header)
- Regex transform engine with preprocess / postprocess rule lists
- Batch converter writing YAML or JSON output
"""

from .version import VERSION as __version__

from .config.loader import ConfigLoader
from .config.models import P2IConfig, TransformRule
from .engine.transform_engine import TransformEngine
from .converters.postman_importer import PostmanImporter, convert
from .converters.batch import BatchConverter, ConversionResult

__all__ = [
    "__version__",
    "ConfigLoader",
    "P2IConfig",
    "TransformRule",
    "TransformEngine",
    "PostmanImporter",
    "convert",
    "BatchConverter",
    "ConversionResult",
]
