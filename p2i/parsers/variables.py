"""
Template variable normalisation.

Postman templates use {{name}} placeholders and {{$dynamic}} generators;
Insomnia renders Nunjucks, which needs faker tags for the generators and
bracket access for names that are not valid identifiers.
"""

import re
from typing import Any

from ..utils.constants import FAKER_TAGS

_FAKER_PATTERNS = [
    (re.compile(r'\{\{\$' + re.escape(tag) + r'\}\}'), "{% faker '" + tag + "' %}")
    for tag in FAKER_TAGS
]

# {{ name }} with optional surrounding whitespace; the name stops at the
# first space or closing brace
_PLACEHOLDER = re.compile(r'\{\{\s*([^ }]+)\s*[^}]*\s*\}\}')


def force_bracket_notation(prefix: str, path: str) -> str:
    """Render `prefix.path`, or `prefix['path']` when path has a hyphen."""
    if '-' in path:
        return f"{prefix}['{path}']"
    return f"{prefix}.{path}"


def normalise_json_path(text: str) -> str:
    """Rewrite hyphenated placeholders: {{my-var}} -> {{_['my-var']}}."""
    if not text:
        return ''
    if '-' not in text:
        return text

    def bracket(match: re.Match) -> str:
        name = match.group(1)
        if '-' not in name:
            return match.group(0)
        return '{{' + force_bracket_notation('_', name) + '}}'

    return _PLACEHOLDER.sub(bracket, text)


def transform_postman_to_nunjucks(value: Any) -> Any:
    """
    Translate a Postman template string for Insomnia.

    None and empty values become ''; non-string values pass through.
    """
    if not value:
        return ''
    if not isinstance(value, str):
        return value

    for pattern, replacement in _FAKER_PATTERNS:
        value = pattern.sub(replacement, value)
    return normalise_json_path(value)


def transform_variable_name(name: str) -> str:
    """Insomnia environment keys cannot contain dots: api.key -> api_key."""
    if not name:
        return ''
    return name.replace('.', '_')
