"""
Postman environment conversion.

Environment and globals exports are flat key/value lists; they become an
Insomnia workspace record plus one environment record.
"""

import time
from typing import Any, Dict, List

from ..generators.id_factory import generate_id
from ..parsers.variables import transform_postman_to_nunjucks, transform_variable_name
from ..utils.constants import POSTMAN_ENVIRONMENT_SCOPES, RECORD_TYPES, DEFAULT_ENVIRONMENT_NAME


def convert_environment(environment: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Convert a Postman environment or globals export.

    Variables explicitly marked `enabled: false` are dropped; entries
    without an `enabled` key are kept.

    Args:
        environment: Parsed Postman environment document

    Returns:
        [workspace, environment] records, or [] for an unknown scope
    """
    scope = environment.get('_postman_variable_scope')
    if scope not in POSTMAN_ENVIRONMENT_SCOPES:
        return []

    data = {}
    for variable in environment.get('values') or []:
        if not isinstance(variable, dict) or variable.get('enabled', True) is False:
            continue
        key = variable.get('key')
        if not key:
            continue
        data[transform_variable_name(str(key))] = transform_postman_to_nunjucks(variable.get('value', ''))

    workspace_id = generate_id('wrk')
    workspace = {
        '_id': workspace_id,
        '_type': RECORD_TYPES['WORKSPACE'],
        'name': str(environment.get('name') or 'Imported Environment'),
        'description': f"Imported from Postman {scope}",
        'parentId': None,
        'scope': 'environment',
    }
    insomnia_environment = {
        '_id': generate_id('env'),
        '_type': RECORD_TYPES['ENVIRONMENT'],
        'name': str(environment.get('name') or DEFAULT_ENVIRONMENT_NAME),
        'data': data,
        'dataPropertyOrder': {},
        'color': None,
        'isPrivate': False,
        'parentId': workspace_id,
        'metaSortKey': -int(time.time() * 1000),
    }
    return [workspace, insomnia_environment]
