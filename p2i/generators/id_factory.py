"""
Identifier factory for postman2insomnia.

Insomnia expects ids of the form <prefix>_<32 lowercase hex chars>.
"""

import secrets
import uuid

from ..utils.constants import ID_PREFIXES


def generate_id(prefix: str) -> str:
    """
    Generate a random Insomnia id for workspaces, environments and cookie
    jars (any known prefix is accepted).

    Raises:
        ValueError: If prefix is not one of wrk, env, jar, req, fld
    """
    if prefix not in ID_PREFIXES:
        raise ValueError(f"Unknown id prefix: {prefix}. Must be one of {ID_PREFIXES}")
    return f"{prefix}_{uuid.uuid4().hex}"


class IdFactory:
    """
    Sequential request and folder ids for one import.

    Each id is the 8-hex-digit counter followed by 24 hex digits from the
    OS CSPRNG, so counters restart at 1 for every import while ids stay
    unique across imports, threads and processes.
    """

    def __init__(self):
        self.request_counter = 0
        self.folder_counter = 0

    def _make(self, prefix: str, counter: int) -> str:
        return f"{prefix}_{counter & 0xFFFFFFFF:08x}{secrets.token_hex(12)}"

    def request_id(self) -> str:
        self.request_counter += 1
        return self._make('req', self.request_counter)

    def folder_id(self) -> str:
        self.folder_counter += 1
        return self._make('fld', self.folder_counter)
