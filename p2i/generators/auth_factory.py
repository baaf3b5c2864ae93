"""
Authentication factory for postman2insomnia.

This module maps Postman auth declarations to Insomnia authentication
records. When an item declares no auth, the scheme is inferred from its
Authorization header instead.
"""

import base64
import binascii
import re
from typing import Any, Dict, List, Optional

from ..parsers.variables import transform_postman_to_nunjucks
from ..utils.trace_logger import TraceLogger

GRANT_TYPE_MAP = {
    'authorization_code_with_pkce': 'authorization_code',
    'password_credentials': 'password',
}

# Signing headers folded into an inferred AWS IAM record
AWS_SIGNING_HEADERS = ['authorization', 'x-amz-date', 'x-amz-security-token', 'x-amz-content-sha256']

_HEADER_PARAM = re.compile(r'([\w-]+)\s*=\s*(?:"([^"]*)"|([^,\s]*))')


def _auth_params(auth: Dict[str, Any], auth_type: str) -> Dict[str, Any]:
    """
    Flatten the parameters of an auth block.

    v2.1 stores a list of {key, value} entries, v2.0 a plain mapping.
    """
    params = auth.get(auth_type)
    if isinstance(params, dict):
        return params
    if isinstance(params, list):
        flattened = {}
        for entry in params:
            if isinstance(entry, dict) and isinstance(entry.get('key'), str):
                flattened.setdefault(entry['key'], entry.get('value'))
        return flattened
    return {}


def _header_params(value: str) -> Dict[str, str]:
    """Parse key="value", key=value pairs from an Authorization header."""
    return {m.group(1): m.group(2) if m.group(2) is not None else m.group(3)
            for m in _HEADER_PARAM.finditer(value)}


def _text(params: Dict[str, Any], key: str, default: str = '') -> str:
    value = params.get(key)
    if value is None or value == '':
        return default
    return transform_postman_to_nunjucks(value)


class AuthFactory:
    """
    Factory class for creating Insomnia authentication records.

    resolve() never raises: unknown auth types and unrecognised header
    schemes produce an empty authentication record.
    """

    def __init__(self, trace_logger: Optional[TraceLogger] = None):
        self.trace_logger = trace_logger or TraceLogger.disabled()
        self._explicit = {
            'basic': self._basic,
            'bearer': self._bearer,
            'digest': self._digest,
            'oauth1': self._oauth1,
            'oauth2': self._oauth2,
            'apikey': self._apikey,
            'awsv4': self._awsv4,
        }
        self._inferred = {
            'bearer': self._infer_bearer,
            'basic': self._infer_basic,
            'digest': self._infer_digest,
            'oauth': self._infer_oauth,
            'aws4-hmac-sha256': self._infer_aws,
        }

    def resolve(
        self,
        explicit_auth: Optional[Dict[str, Any]],
        original_headers: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """
        Resolve authentication for a request, folder or collection.

        Args:
            explicit_auth: Postman auth block, or None
            original_headers: Postman header entries ({key, value, ...})

        Returns:
            Dictionary with 'authentication' (possibly empty) and 'headers'
            (a new list; only AWS inference removes entries)
        """
        headers = [h for h in (original_headers or []) if isinstance(h, dict)]

        auth_type = explicit_auth.get('type') if isinstance(explicit_auth, dict) else None
        if auth_type and auth_type != 'noauth':
            builder = self._explicit.get(auth_type) if isinstance(auth_type, str) else None
            if builder is None:
                self.trace_logger.log_warning("Unsupported auth type dropped", {'type': auth_type})
                return {'authentication': {}, 'headers': headers}
            return {'authentication': builder(_auth_params(explicit_auth, auth_type)), 'headers': headers}

        return self._infer_from_headers(headers)

    # ------------------------------------------------------------------
    # Explicit auth declarations
    # ------------------------------------------------------------------

    def _basic(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'type': 'basic',
            'username': _text(params, 'username'),
            'password': _text(params, 'password'),
            'useISO88591': False,
            'disabled': False,
        }

    def _bearer(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'type': 'bearer',
            'token': _text(params, 'token'),
            'prefix': '',
            'disabled': False,
        }

    def _digest(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'type': 'digest',
            'username': _text(params, 'username'),
            'password': _text(params, 'password'),
            'disabled': False,
        }

    def _oauth1(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'type': 'oauth1',
            'consumerKey': _text(params, 'consumerKey'),
            'consumerSecret': _text(params, 'consumerSecret'),
            'tokenKey': _text(params, 'token'),
            'tokenSecret': _text(params, 'tokenSecret'),
            'signatureMethod': _text(params, 'signatureMethod', 'HMAC-SHA1'),
            'disabled': False,
        }

    def _oauth2(self, params: Dict[str, Any]) -> Dict[str, Any]:
        grant_type = params.get('grant_type')
        if not isinstance(grant_type, str) or not grant_type:
            grant_type = 'authorization_code'
        return {
            'type': 'oauth2',
            'grantType': GRANT_TYPE_MAP.get(grant_type, grant_type),
            'accessTokenUrl': _text(params, 'accessTokenUrl'),
            'authorizationUrl': _text(params, 'authUrl'),
            'clientId': _text(params, 'clientId'),
            'clientSecret': _text(params, 'clientSecret'),
            'scope': _text(params, 'scope'),
            'accessToken': _text(params, 'accessToken'),
            'disabled': False,
        }

    def _apikey(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'type': 'apikey',
            'key': _text(params, 'key'),
            'value': _text(params, 'value'),
            'addTo': 'queryParams' if params.get('in') == 'query' else 'header',
            'disabled': False,
        }

    def _awsv4(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'type': 'iam',
            'accessKeyId': _text(params, 'accessKey'),
            'secretAccessKey': _text(params, 'secretKey'),
            'sessionToken': _text(params, 'sessionToken'),
            'region': _text(params, 'region'),
            'service': _text(params, 'service'),
            'disabled': False,
        }

    # ------------------------------------------------------------------
    # Inference from the Authorization header
    # ------------------------------------------------------------------

    def _infer_from_headers(self, headers: List[Dict[str, Any]]) -> Dict[str, Any]:
        auth_header = next(
            (h for h in headers if str(h.get('key', '')).lower() == 'authorization'),
            None
        )
        value = auth_header.get('value') if auth_header else None
        if not isinstance(value, str) or not value.strip():
            return {'authentication': {}, 'headers': headers}

        parts = value.strip().split(None, 1)
        scheme = parts[0].lower()
        credentials = parts[1].strip() if len(parts) > 1 else ''

        infer = self._inferred.get(scheme)
        if infer is None:
            return {'authentication': {}, 'headers': headers}

        self.trace_logger.log_decision("Authentication inferred from Authorization header", {'scheme': parts[0]})
        return infer(credentials, headers)

    def _infer_bearer(self, credentials: str, headers: List[Dict[str, Any]]) -> Dict[str, Any]:
        authentication = {
            'type': 'bearer',
            'token': transform_postman_to_nunjucks(credentials),
            'prefix': '',
            'disabled': False,
        }
        return {'authentication': authentication, 'headers': headers}

    def _infer_basic(self, credentials: str, headers: List[Dict[str, Any]]) -> Dict[str, Any]:
        username, password = '', ''
        try:
            decoded = base64.b64decode(credentials, validate=True).decode('utf-8')
            username, _, password = decoded.partition(':')
        except (binascii.Error, UnicodeDecodeError, ValueError):
            # Templated or malformed credentials: keep the scheme only
            pass

        authentication = {
            'type': 'basic',
            'username': username,
            'password': password,
            'useISO88591': False,
            'disabled': False,
        }
        return {'authentication': authentication, 'headers': headers}

    def _infer_digest(self, credentials: str, headers: List[Dict[str, Any]]) -> Dict[str, Any]:
        params = _header_params(credentials)
        authentication = {
            'type': 'digest',
            'username': params.get('username', ''),
            'password': '',
            'disabled': False,
        }
        return {'authentication': authentication, 'headers': headers}

    def _infer_oauth(self, credentials: str, headers: List[Dict[str, Any]]) -> Dict[str, Any]:
        params = _header_params(credentials)
        authentication = {
            'type': 'oauth1',
            'consumerKey': params.get('oauth_consumer_key', ''),
            'consumerSecret': '',
            'tokenKey': params.get('oauth_token', ''),
            'tokenSecret': '',
            'signatureMethod': params.get('oauth_signature_method', 'HMAC-SHA1'),
            'disabled': False,
        }
        return {'authentication': authentication, 'headers': headers}

    def _infer_aws(self, credentials: str, headers: List[Dict[str, Any]]) -> Dict[str, Any]:
        params = _header_params(credentials)
        # Credential=<access key>/<date>/<region>/<service>/aws4_request
        scope = params.get('Credential', '').split('/')
        scope += [''] * (4 - len(scope))

        session_token = next(
            (h.get('value', '') for h in headers if str(h.get('key', '')).lower() == 'x-amz-security-token'),
            ''
        )
        remaining = [h for h in headers if str(h.get('key', '')).lower() not in AWS_SIGNING_HEADERS]

        authentication = {
            'type': 'iam',
            'accessKeyId': scope[0],
            'secretAccessKey': '',
            'sessionToken': transform_postman_to_nunjucks(session_token),
            'region': scope[2],
            'service': scope[3],
            'disabled': False,
        }
        return {'authentication': authentication, 'headers': remaining}
