"""
Saved Postman responses rendered as Markdown.

Insomnia has no equivalent of Postman's saved example responses, so they
are appended to the request description instead.
"""

import json
from typing import Any, Dict, List


def description_text(description: Any) -> str:
    """Postman descriptions are strings (v2.0) or {content: ...} (v2.1)."""
    if isinstance(description, str):
        return description
    if isinstance(description, dict):
        content = description.get('content')
        return content if isinstance(content, str) else ''
    return ''


def is_valid_response_example(response: Any) -> bool:
    return (isinstance(response, dict)
            and isinstance(response.get('name'), str)
            and isinstance(response.get('status'), str)
            and isinstance(response.get('code'), int)
            and not isinstance(response.get('code'), bool))


def _header_map(headers: Any) -> Dict[str, Any]:
    if not isinstance(headers, list):
        return {}
    return {h.get('key'): h.get('value') for h in headers if isinstance(h, dict) and 'key' in h}


def _url_text(url: Any) -> str:
    if isinstance(url, str):
        return url
    if isinstance(url, dict):
        return url.get('raw') or ''
    return ''


def _json_block(heading: str, data: Dict[str, Any]) -> str:
    return f"### {heading}\n\n```json\n{json.dumps(data, indent=2, ensure_ascii=False)}\n```"


def format_response_examples(responses: List[Dict[str, Any]]) -> str:
    """
    Render response examples as a Markdown section.

    Returns:
        '' when there are no examples, otherwise a section starting with
        two newlines and a '## Response Examples' heading
    """
    if not responses:
        return ''

    blocks = []
    for index, response in enumerate(responses, 1):
        parts = []

        original = response.get('originalRequest')
        if isinstance(original, dict):
            request_data = {
                'method': original.get('method'),
                'url': _url_text(original.get('url')),
            }
            headers = _header_map(original.get('header'))
            if headers:
                request_data['headers'] = headers
            parts.append(_json_block(f"Request Example {index}: {response['name']}", request_data))

        response_data = {
            'name': response['name'],
            'status': response['status'],
            'code': response['code'],
        }
        headers = _header_map(response.get('header'))
        if headers:
            response_data['headers'] = headers
        body = response.get('body')
        if body:
            try:
                response_data['body'] = json.loads(body)
            except (json.JSONDecodeError, TypeError):
                response_data['body'] = body
        if response.get('_postman_previewlanguage'):
            response_data['contentType'] = response['_postman_previewlanguage']
        parts.append(_json_block(f"Response Example {index}: {response['name']}", response_data))

        blocks.append('\n\n'.join(parts))

    return '\n\n## Response Examples\n\n' + '\n\n'.join(blocks)


def enhance_description(item: Dict[str, Any]) -> str:
    """Return the item's description with its valid saved responses appended."""
    description = description_text(item.get('description'))
    responses = item.get('response')
    if isinstance(responses, list):
        description += format_response_examples([r for r in responses if is_valid_response_example(r)])
    return description
