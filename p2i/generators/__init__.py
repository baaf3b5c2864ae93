"""
Generator modules for postman2insomnia.

Factories that build the pieces of an Insomnia record: ids,
authentication, bodies and scripts.
"""

from .auth_factory import AuthFactory
from .body_factory import BodyFactory
from .id_factory import IdFactory, generate_id
from .script_factory import ScriptFactory, PrefixRewriter

__all__ = [
    "AuthFactory",
    "BodyFactory",
    "IdFactory",
    "generate_id",
    "ScriptFactory",
    "PrefixRewriter",
]
