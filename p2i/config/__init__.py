"""
Configuration management module for postman2insomnia.

This module handles loading and validation of the converter settings and
of transform rule files, and holds the built-in rule sets.
"""

from .loader import ConfigLoader
from .models import (
    P2IConfig,
    OutputConfig,
    TransformsConfig,
    ImportConfig,
    TraceLogConfig,
    TransformRule,
    TransformConfig,
)

__all__ = [
    "ConfigLoader",
    "P2IConfig",
    "OutputConfig",
    "TransformsConfig",
    "ImportConfig",
    "TraceLogConfig",
    "TransformRule",
    "TransformConfig",
]
