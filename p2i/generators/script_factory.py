"""
Script factory for postman2insomnia.

This module converts Postman event scripts (pre-request and test) into
Insomnia pre-request and after-response scripts.
"""

import re
from typing import Any, Dict, List, Optional

from ..utils.trace_logger import TraceLogger, VerbosityLevel

IDENTIFIER_CHARS = re.compile(r'[0-9a-zA-Z_$]')

_COLLECTION_VARIABLE_WRITE = re.compile(r'(?<![\w$])insomnia\.collectionVariables\.(set|unset)\(')
_COLLECTION_VARIABLE_READ = re.compile(r'(?<![\w$])insomnia\.collectionVariables\.(get|has)\(')


class PrefixRewriter:
    """
    Renames a call-site namespace prefix, e.g. pm. -> insomnia.

    The rewrite is purely textual: an occurrence is renamed whenever the
    character before it is not an identifier character, so occurrences in
    string literals and comments are renamed as well.
    """

    def __init__(self, source: str = 'pm', target: str = 'insomnia', separator: str = '.'):
        self.token = source + separator
        self.replacement = target + separator

    def rewrite(self, text: str) -> str:
        token_len = len(self.token)
        drift = len(self.replacement) - token_len
        rewritten = text
        offset = 0

        # Matches are found in the original text; offset maps them onto the
        # rewritten text, which grows by `drift` per replacement.
        for i in range(len(text) - token_len + 1):
            if text[i:i + token_len] != self.token:
                continue
            if i > 0 and IDENTIFIER_CHARS.match(text[i - 1]):
                continue
            start = i + offset
            rewritten = rewritten[:start] + self.replacement + rewritten[start + token_len:]
            offset += drift

        return rewritten


def rewrite_collection_variables(script: str, folder_name: str) -> str:
    """
    Point insomnia.collectionVariables calls at the enclosing folder's
    environment, where Insomnia keeps collection-scoped variables.

    Writes go through a `thisFolder` constant declared at the top of the
    script; reads address the folder inline.
    """
    quoted = folder_name.replace('\\', '\\\\').replace("'", "\\'")
    folder_ref = f"insomnia.parentFolders.get('{quoted}')"

    rewritten = _COLLECTION_VARIABLE_READ.sub(lambda m: f"{folder_ref}.environment.{m.group(1)}(", script)
    rewritten, writes = _COLLECTION_VARIABLE_WRITE.subn(lambda m: f"thisFolder.environment.{m.group(1)}(", rewritten)
    if writes:
        rewritten = f"const thisFolder = {folder_ref};\n{rewritten}"
    return rewritten


class ScriptFactory:
    """
    Factory class for creating Insomnia scripts from Postman events.

    Each script goes through the prefix rewriter, then the collection
    variable rewrite, then the transform engine's postprocess rules when an
    engine is supplied.
    """

    LISTENERS = {
        'pre_request': 'prerequest',
        'after_response': 'test',
    }

    def __init__(
        self,
        transform_engine=None,
        experimental: bool = False,
        trace_logger: Optional[TraceLogger] = None
    ):
        """
        Initialize script factory.

        Args:
            transform_engine: Optional TransformEngine for postprocessing
            experimental: Also apply the engine's experimental rules
            trace_logger: Optional trace logger for rewrite decisions
        """
        self.transform_engine = transform_engine
        self.experimental = experimental
        self.rewriter = PrefixRewriter()
        self.trace_logger = trace_logger or TraceLogger.disabled()

    @staticmethod
    def extract_source(events: Optional[List[Dict[str, Any]]], listen: str) -> str:
        """Return the joined exec lines of the first event for `listen`."""
        if not events:
            return ''

        event = next((e for e in events if isinstance(e, dict) and e.get('listen') == listen), None)
        script = event.get('script') if event else None
        if not script or not isinstance(script, dict):
            return ''

        exec_lines = script.get('exec')
        if isinstance(exec_lines, list):
            return '\n'.join(line for line in exec_lines if isinstance(line, str))
        if isinstance(exec_lines, str):
            return exec_lines
        return ''

    def translate(self, source: str, folder_name: str) -> str:
        """Translate Postman script text for a given variable scope folder."""
        if not source:
            return ''

        translated = self.rewriter.rewrite(source)

        if 'insomnia.collectionVariables.' in translated:
            translated = rewrite_collection_variables(translated, folder_name)
            self.trace_logger.log_decision(
                "Collection variables mapped to folder environment",
                {'folder': folder_name}
            )

        if self.transform_engine is not None:
            translated = self.transform_engine.postprocess(translated, experimental=self.experimental)

        return translated

    def create_scripts(self, events: Optional[List[Dict[str, Any]]], folder_name: str) -> Dict[str, str]:
        """
        Create both lifecycle scripts for an item.

        Args:
            events: Postman event list (may be None)
            folder_name: Folder whose environment holds collection variables

        Returns:
            Dictionary with preRequestScript and afterResponseScript
            (empty strings when the hook is absent)
        """
        pre_request = self.translate(self.extract_source(events, self.LISTENERS['pre_request']), folder_name)
        after_response = self.translate(self.extract_source(events, self.LISTENERS['after_response']), folder_name)

        if pre_request or after_response:
            self.trace_logger.log_source_data('Postman events', events, VerbosityLevel.DEBUG)

        return {
            'preRequestScript': pre_request,
            'afterResponseScript': after_response,
        }
