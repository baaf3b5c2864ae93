"""
Postman collection importer for postman2insomnia.

Walks a Postman v2.0 / v2.1 collection tree and flattens it into an
ordered list of Insomnia `request` and `request_group` records. Parents
always precede their children; sibling order is carried by strictly
decreasing metaSortKey values.

Folder authentication is not copied onto requests; Insomnia resolves
inherited auth itself.
"""

import time
from typing import Any, Dict, List, Optional

from ..generators.auth_factory import AuthFactory
from ..generators.body_factory import BodyFactory
from ..generators.id_factory import IdFactory
from ..generators.script_factory import ScriptFactory
from ..parsers.postman_parser import parse_document, schema_version
from ..parsers.variables import transform_postman_to_nunjucks, transform_variable_name
from ..utils.constants import (
    WORKSPACE_ID_SENTINEL,
    RECORD_TYPES,
    CONTENT_TYPES,
    DEFAULT_COLLECTION_NAME,
    DEFAULT_REQUEST_NAME,
    DEFAULT_FOLDER_NAME,
)
from ..utils.exceptions import CollectionParsingError, UnsupportedSchemaError
from ..utils.trace_logger import TraceLogger, VerbosityLevel
from .response_examples import description_text, enhance_description


def parse_header_string(header_text: str) -> List[Dict[str, Any]]:
    """
    Parse a v2.0 raw header block ("Key: value" per line).

    Lines commented out with // are kept as disabled headers.
    """
    headers = []
    for line in header_text.splitlines():
        line = line.strip()
        if not line:
            continue
        disabled = line.startswith('//')
        if disabled:
            line = line[2:].strip()
        key, _, value = line.partition(':')
        header = {'key': key.strip(), 'value': value.strip()}
        if disabled:
            header['disabled'] = True
        headers.append(header)
    return headers


def import_url(url: Any) -> str:
    """
    Normalise a Postman URL to a string.

    A structured URL prefers `raw`; its query string is dropped when the
    query is also given as separate parameters. Without `raw` the URL is
    rebuilt from protocol, host, port and path.
    """
    if isinstance(url, str):
        return url
    if not isinstance(url, dict):
        return ''

    raw = url.get('raw')
    if isinstance(raw, str) and raw:
        if url.get('query') and '?' in raw:
            return raw[:raw.index('?')]
        return raw

    host = url.get('host') or ''
    if isinstance(host, list):
        host = '.'.join(str(part) for part in host)
    if not host:
        return ''

    rebuilt = f"{url['protocol']}://{host}" if url.get('protocol') else host
    if url.get('port'):
        rebuilt += f":{url['port']}"

    path = url.get('path') or ''
    if isinstance(path, list):
        path = '/'.join(str(segment) if not isinstance(segment, dict) else str(segment.get('value', ''))
                        for segment in path)
    if path:
        rebuilt += path if path.startswith('/') else f"/{path}"
    return rebuilt


class PostmanImporter:
    """
    Importer for one Postman collection.

    Args:
        collection: Parsed collection document
        transform_engine: Optional TransformEngine applied to scripts
        experimental: Apply the engine's experimental postprocess rules
        use_collection_folder: Nest all items under a folder named after
                               the collection
        include_response_examples: Append saved responses to request
                                   descriptions
        trace_logger: Optional trace logger for conversion decisions
    """

    def __init__(
        self,
        collection: Dict[str, Any],
        transform_engine=None,
        experimental: bool = False,
        use_collection_folder: bool = False,
        include_response_examples: bool = False,
        trace_logger: Optional[TraceLogger] = None
    ):
        self.collection = collection
        self.use_collection_folder = use_collection_folder
        self.include_response_examples = include_response_examples
        self.trace_logger = trace_logger or TraceLogger.disabled()

        self.auth_factory = AuthFactory(self.trace_logger)
        self.body_factory = BodyFactory(self.trace_logger)
        self.script_factory = ScriptFactory(transform_engine, experimental, self.trace_logger)

    def import_collection(self) -> List[Dict[str, Any]]:
        """
        Convert the collection into an ordered list of records.

        Returns:
            Records in emission order; the first is always the root
            request_group for the collection itself

        Raises:
            UnsupportedSchemaError: If the schema URL is not v2.0.0 or v2.1.0
        """
        version = schema_version(self.collection)
        if version is None:
            info = self.collection.get('info')
            schema = info.get('schema') if isinstance(info, dict) else None
            raise UnsupportedSchemaError(f"Collection schema not recognized: {schema}")

        self.trace_logger.log_decision("Collection schema detected", {'version': version})

        # Counters restart for every import
        ids = IdFactory()
        info = self.collection['info']
        name = str(info.get('name') or DEFAULT_COLLECTION_NAME)

        scripts = self.script_factory.create_scripts(self.collection.get('event'), name)
        root = {
            '_id': ids.folder_id(),
            '_type': RECORD_TYPES['REQUEST_GROUP'],
            'parentId': WORKSPACE_ID_SENTINEL,
            'name': name,
            'description': description_text(info.get('description')),
            'authentication': self.auth_factory.resolve(self.collection.get('auth'))['authentication'],
            'preRequestScript': scripts['preRequestScript'],
            'afterResponseScript': scripts['afterResponseScript'],
        }
        variables = self._import_variables(self.collection.get('variable'))
        if variables:
            root['variable'] = variables

        records = [root]
        parent_id = root['_id']

        if self.use_collection_folder:
            collection_folder = {
                '_id': ids.folder_id(),
                '_type': RECORD_TYPES['REQUEST_GROUP'],
                'parentId': root['_id'],
                'name': name,
                'description': '',
                'authentication': {},
                'preRequestScript': '',
                'afterResponseScript': '',
            }
            records.append(collection_folder)
            parent_id = collection_folder['_id']
            self.trace_logger.log_decision("Items nested under collection folder", {'folder': name})

        records.extend(self._import_items(self.collection.get('item'), parent_id, name, ids))

        now = int(time.time() * 1000)
        for index, record in enumerate(records):
            record['metaSortKey'] = -(now + index)

        self.trace_logger.log_decision(
            "Collection imported",
            {'records': len(records),
             'requests': ids.request_counter,
             'folders': ids.folder_counter}
        )
        return records

    def _import_items(
        self,
        items: Any,
        parent_id: str,
        folder_name: str,
        ids: IdFactory
    ) -> List[Dict[str, Any]]:
        records = []
        for item in items if isinstance(items, list) else []:
            if not isinstance(item, dict):
                continue
            if 'request' in item:
                records.append(self._import_request(item, parent_id, folder_name, ids))
            else:
                group = self._import_folder(item, parent_id, ids)
                records.append(group)
                records.extend(self._import_items(item.get('item'), group['_id'], group['name'], ids))
        return records

    def _import_folder(self, item: Dict[str, Any], parent_id: str, ids: IdFactory) -> Dict[str, Any]:
        name = str(item.get('name') or DEFAULT_FOLDER_NAME)
        scripts = self.script_factory.create_scripts(item.get('event'), name)
        return {
            '_id': ids.folder_id(),
            '_type': RECORD_TYPES['REQUEST_GROUP'],
            'parentId': parent_id,
            'name': name,
            'description': description_text(item.get('description')),
            'authentication': self.auth_factory.resolve(item.get('auth'))['authentication'],
            'preRequestScript': scripts['preRequestScript'],
            'afterResponseScript': scripts['afterResponseScript'],
        }

    def _import_request(
        self,
        item: Dict[str, Any],
        parent_id: str,
        folder_name: str,
        ids: IdFactory
    ) -> Dict[str, Any]:
        request = item.get('request')
        name = str(item.get('name') or DEFAULT_REQUEST_NAME)
        scripts = self.script_factory.create_scripts(item.get('event'), folder_name)

        if not isinstance(request, dict):
            # A bare URL string is a GET request
            self.trace_logger.log_decision("Request given as URL string", {'request': name},
                                           VerbosityLevel.DETAILED)
            request = {'url': request if isinstance(request, str) else '', 'method': 'GET'}

        raw_headers = request.get('header')
        if isinstance(raw_headers, str):
            raw_headers = parse_header_string(raw_headers)
        resolved = self.auth_factory.resolve(request.get('auth'), raw_headers if isinstance(raw_headers, list) else [])
        headers = resolved['headers']

        body = self.body_factory.create_body(request.get('body'))
        has_content_type = any(str(h.get('key', '')).lower() == 'content-type' for h in headers)
        if body.get('mimeType') and not has_content_type:
            content_type = body['mimeType']
            if content_type == CONTENT_TYPES['GRAPHQL']:
                content_type = CONTENT_TYPES['JSON']
            headers = headers + [{'key': 'Content-Type', 'value': content_type}]

        url = request.get('url')
        parameters = []
        if isinstance(url, dict) and isinstance(url.get('query'), list):
            parameters = [
                {
                    'name': transform_postman_to_nunjucks(param.get('key')),
                    'value': transform_postman_to_nunjucks(param.get('value')),
                    'disabled': bool(param.get('disabled', False)),
                }
                for param in url['query'] if isinstance(param, dict)
            ]

        description_source = {'description': request.get('description') or item.get('description')}
        if self.include_response_examples:
            description_source['response'] = item.get('response')
        description = enhance_description(description_source)

        return {
            '_id': ids.request_id(),
            '_type': RECORD_TYPES['REQUEST'],
            'parentId': parent_id,
            'name': name,
            'description': description,
            'url': transform_postman_to_nunjucks(import_url(url)),
            'method': request.get('method') or 'GET',
            'headers': [self._import_header(h) for h in headers],
            'parameters': parameters,
            'body': body,
            'authentication': resolved['authentication'],
            'preRequestScript': scripts['preRequestScript'],
            'afterResponseScript': scripts['afterResponseScript'],
        }

    @staticmethod
    def _import_header(header: Dict[str, Any]) -> Dict[str, Any]:
        converted = {
            'name': transform_postman_to_nunjucks(header.get('key')),
            'value': transform_postman_to_nunjucks(header.get('value')),
        }
        if 'disabled' in header:
            converted['disabled'] = bool(header['disabled'])
        if 'description' in header:
            converted['description'] = description_text(header['description'])
        return converted

    def _import_variables(self, variables: Any) -> Dict[str, Any]:
        data = {}
        for variable in variables if isinstance(variables, list) else []:
            if not isinstance(variable, dict) or variable.get('disabled') is True:
                continue
            key = variable.get('key')
            if key is None or key == '':
                continue
            data[transform_variable_name(str(key))] = transform_postman_to_nunjucks(variable.get('value'))
        return data


def convert(
    raw_data: str,
    transform_engine=None,
    experimental: bool = False,
    use_collection_folder: bool = False,
    include_response_examples: bool = False,
    trace_logger: Optional[TraceLogger] = None
) -> Optional[List[Dict[str, Any]]]:
    """
    Convert raw collection text to Insomnia records.

    Returns:
        The record list, or None when the text is not JSON or the schema
        is not recognised (the reason is printed)
    """
    try:
        collection = parse_document(raw_data)
        importer = PostmanImporter(
            collection,
            transform_engine,
            experimental=experimental,
            use_collection_folder=use_collection_folder,
            include_response_examples=include_response_examples,
            trace_logger=trace_logger
        )
        return importer.import_collection()
    except (CollectionParsingError, UnsupportedSchemaError) as e:
        print(f"   ❌ Error parsing Postman collection: {e}")
        return None
