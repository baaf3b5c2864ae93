"""
Body factory for postman2insomnia.

Converts a Postman request body into an Insomnia body record, dispatching
on the body mode. Unknown modes and empty bodies produce {}.
"""

import json
from typing import Any, Dict, List, Optional

from ..parsers.variables import transform_postman_to_nunjucks
from ..utils.constants import CONTENT_TYPES, RAW_LANGUAGE_CONTENT_TYPES
from ..utils.trace_logger import TraceLogger


def _is_disabled(param: Dict[str, Any]) -> bool:
    """v2.1 marks parameters with `disabled`, v2.0 with `enabled`."""
    if 'disabled' in param:
        return bool(param['disabled'])
    if 'enabled' in param:
        return not param['enabled']
    return False


class BodyFactory:
    """Factory class for creating Insomnia request bodies."""

    def __init__(self, trace_logger: Optional[TraceLogger] = None):
        self.trace_logger = trace_logger or TraceLogger.disabled()
        self._modes = {
            'raw': self._raw,
            'formdata': self._formdata,
            'urlencoded': self._urlencoded,
            'graphql': self._graphql,
        }

    def create_body(self, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Create an Insomnia body from a Postman body.

        Args:
            body: Postman body object, or None

        Returns:
            Insomnia body dictionary ({} when there is nothing to send)
        """
        if not isinstance(body, dict):
            return {}

        mode = body.get('mode')
        handler = self._modes.get(mode) if isinstance(mode, str) else None
        if handler is None:
            if mode:
                self.trace_logger.log_warning("Unsupported body mode dropped", {'mode': mode})
            return {}
        return handler(body)

    def _raw(self, body: Dict[str, Any]) -> Dict[str, Any]:
        raw = body.get('raw')
        if not raw or not isinstance(raw, str):
            return {}

        options = body.get('options')
        raw_options = options.get('raw') if isinstance(options, dict) else None
        language = raw_options.get('language', '') if isinstance(raw_options, dict) else ''

        return {
            'mimeType': RAW_LANGUAGE_CONTENT_TYPES.get(language, CONTENT_TYPES['PLAINTEXT']),
            'text': transform_postman_to_nunjucks(raw),
        }

    def _form_params(self, params: Any) -> List[Dict[str, Any]]:
        converted = []
        for param in params if isinstance(params, list) else []:
            if not isinstance(param, dict):
                continue
            if param.get('type') == 'file':
                converted.append({
                    'name': param.get('key', ''),
                    'type': 'file',
                    'fileName': param.get('src') or '',
                    'disabled': _is_disabled(param),
                })
            else:
                converted.append({
                    'name': param.get('key', ''),
                    'value': transform_postman_to_nunjucks(param.get('value')),
                    'disabled': _is_disabled(param),
                })
        return converted

    def _formdata(self, body: Dict[str, Any]) -> Dict[str, Any]:
        params = self._form_params(body.get('formdata'))
        if not params:
            return {}
        return {'mimeType': CONTENT_TYPES['FORM_DATA'], 'params': params}

    def _urlencoded(self, body: Dict[str, Any]) -> Dict[str, Any]:
        # File entries are meaningless in a urlencoded body
        params = [p for p in self._form_params(body.get('urlencoded')) if p.get('type') != 'file']
        if not params:
            return {}
        return {'mimeType': CONTENT_TYPES['FORM_URLENCODED'], 'params': params}

    def _graphql(self, body: Dict[str, Any]) -> Dict[str, Any]:
        graphql = body.get('graphql')
        if not isinstance(graphql, dict):
            return {}

        variables = graphql.get('variables') or {}
        if isinstance(variables, str):
            try:
                variables = json.loads(variables) if variables.strip() else {}
            except json.JSONDecodeError:
                self.trace_logger.log_warning("GraphQL variables are not valid JSON; using {}")
                variables = {}

        return {
            'mimeType': CONTENT_TYPES['GRAPHQL'],
            'text': json.dumps({'query': graphql.get('query') or '', 'variables': variables}),
        }
