"""
Transform engine for postman2insomnia.
"""

from .transform_engine import TransformEngine, generate_sample_config

__all__ = [
    "TransformEngine",
    "generate_sample_config",
]
