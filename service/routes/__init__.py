"""
Route blueprints for the conversion service.
"""

from .converter import converter_bp

__all__ = ["converter_bp"]
