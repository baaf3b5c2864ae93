"""
Insomnia v5 document builder and writer.

Turns the flat record list produced by the importer (or the environment
converter) into the nested v5 export document, and writes it as YAML or
JSON.
"""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..generators.id_factory import generate_id
from ..utils.constants import (
    WORKSPACE_ID_SENTINEL,
    RECORD_TYPES,
    INSOMNIA_COLLECTION_TYPE,
    INSOMNIA_ENVIRONMENT_TYPE,
    DEFAULT_ENVIRONMENT_NAME,
    DEFAULT_COOKIE_JAR_NAME,
    OUTPUT_FORMATS,
)
from ..utils.exceptions import ValidationError

REQUEST_SETTINGS = {
    'renderRequestBody': True,
    'encodeUrl': True,
    'rebuildPath': True,
    'followRedirects': 'global',
    'cookies': {'send': True, 'store': True},
}


def _meta(record_id: str, now: int, description: Optional[str] = None,
          sort_key: Optional[int] = None) -> Dict[str, Any]:
    meta = {'id': record_id, 'created': now, 'modified': now, 'isPrivate': False}
    if description is not None:
        meta['description'] = description
    if sort_key is not None:
        meta['sortKey'] = sort_key
    return meta


def _scripts(record: Dict[str, Any]) -> Dict[str, str]:
    return {
        'preRequest': record.get('preRequestScript') or '',
        'afterResponse': record.get('afterResponseScript') or '',
    }


def _request_node(record: Dict[str, Any], now: int) -> Dict[str, Any]:
    headers = []
    for header in record.get('headers') or []:
        node = {'name': header.get('name') or '', 'value': header.get('value') or ''}
        if header.get('disabled'):
            node['disabled'] = True
        headers.append(node)

    return {
        'name': record.get('name') or '',
        'url': record.get('url') or '',
        'method': record.get('method') or 'GET',
        'body': record.get('body') or {},
        'headers': headers,
        'parameters': [
            {'name': p.get('name') or '', 'value': p.get('value') or '', 'disabled': bool(p.get('disabled'))}
            for p in record.get('parameters') or []
        ],
        'pathParameters': [],
        'authentication': record.get('authentication') or {},
        'scripts': _scripts(record),
        'settings': dict(REQUEST_SETTINGS, cookies=dict(REQUEST_SETTINGS['cookies'])),
        'meta': _meta(record['_id'], now, record.get('description') or '', record.get('metaSortKey')),
    }


def _group_node(record: Dict[str, Any], children: List[Dict[str, Any]], now: int) -> Dict[str, Any]:
    return {
        'name': record.get('name') or '',
        'description': record.get('description') or '',
        'environment': record.get('variable') or {},
        'environmentPropertyOrder': {},
        'scripts': _scripts(record),
        'authentication': record.get('authentication') or {},
        'headers': [],
        'meta': _meta(record['_id'], now, record.get('description') or '', record.get('metaSortKey')),
        'children': children,
    }


def build_tree(records: List[Dict[str, Any]], parent_id: str, now: Optional[int] = None) -> List[Dict[str, Any]]:
    """Nest the records whose ancestor chain reaches parent_id."""
    now = now if now is not None else int(time.time() * 1000)
    children_of: Dict[str, List[Dict[str, Any]]] = {}
    for record in records:
        children_of.setdefault(record.get('parentId'), []).append(record)

    def nest(current_id: str) -> List[Dict[str, Any]]:
        nodes = []
        for record in children_of.get(current_id, []):
            if record.get('_type') == RECORD_TYPES['REQUEST']:
                nodes.append(_request_node(record, now))
            elif record.get('_type') == RECORD_TYPES['REQUEST_GROUP']:
                nodes.append(_group_node(record, nest(record['_id']), now))
        return nodes

    return nest(parent_id)


def build_collection_document(records: List[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """
    Build a collection.insomnia.rest/5.0 document.

    With a single root group the document takes its name, id and
    variables and lists its children. Several roots (merged output) are
    each kept as a top-level folder.
    """
    now = int(time.time() * 1000)
    roots = [r for r in records
             if r.get('parentId') == WORKSPACE_ID_SENTINEL and r.get('_type') == RECORD_TYPES['REQUEST_GROUP']]

    if len(roots) == 1:
        root = roots[0]
        document_name = root.get('name') or name
        meta = _meta(root['_id'], now, root.get('description') or '')
        collection = build_tree(records, root['_id'], now)
        variables = dict(root.get('variable') or {})
    else:
        document_name = name
        meta = _meta(generate_id('wrk'), now, '')
        collection = build_tree(records, WORKSPACE_ID_SENTINEL, now)
        variables = {}
        for root in roots:
            variables.update(root.get('variable') or {})

    return {
        'type': INSOMNIA_COLLECTION_TYPE,
        'name': document_name,
        'meta': meta,
        'collection': collection,
        'environments': {
            'name': DEFAULT_ENVIRONMENT_NAME,
            'meta': _meta(generate_id('env'), now),
            'data': variables,
        },
        'cookieJar': {
            'name': DEFAULT_COOKIE_JAR_NAME,
            'meta': _meta(generate_id('jar'), now),
            'cookies': [],
        },
    }


def build_environment_document(records: List[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Build an environment.insomnia.rest/5.0 document from [workspace, environment]."""
    now = int(time.time() * 1000)
    workspace = next((r for r in records if r.get('_type') == RECORD_TYPES['WORKSPACE']), {})
    environment = next((r for r in records if r.get('_type') == RECORD_TYPES['ENVIRONMENT']), {})

    return {
        'type': INSOMNIA_ENVIRONMENT_TYPE,
        'name': workspace.get('name') or name,
        'meta': _meta(workspace.get('_id') or generate_id('wrk'), now, workspace.get('description') or ''),
        'environments': {
            'name': environment.get('name') or DEFAULT_ENVIRONMENT_NAME,
            'meta': _meta(environment.get('_id') or generate_id('env'), now),
            'data': environment.get('data') or {},
        },
    }


def build_document(records: List[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Pick the document type from the records."""
    is_environment = any(r.get('_type') == RECORD_TYPES['WORKSPACE'] and r.get('scope') == 'environment'
                         for r in records)
    if is_environment:
        return build_environment_document(records, name)
    return build_collection_document(records, name)


def dump_document(document: Dict[str, Any], fmt: str = 'yaml') -> str:
    """
    Serialize a document.

    Raises:
        ValidationError: If fmt is not 'yaml' or 'json'
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValidationError(f"Unsupported output format: {fmt}. Must be one of {OUTPUT_FORMATS}")
    if fmt == 'yaml':
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True,
                              default_flow_style=False, width=float('inf'))
    return json.dumps(document, indent=2, ensure_ascii=False)


def write_document(document: Dict[str, Any], output_path: Union[str, Path], fmt: str = 'yaml') -> Path:
    """Write a document to disk and return its path."""
    output_path = Path(output_path)
    output_path.write_text(dump_document(document, fmt), encoding='utf-8')
    return output_path
