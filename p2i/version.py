"""
Release metadata for postman2insomnia, shown by `--version` and the
service's /version endpoint.
"""

from datetime import datetime, timezone

from .utils.constants import INSOMNIA_COLLECTION_TYPE

VERSION = "1.4.0"
BUILD_DATE = "2026-10-19"
CONVERTER_ID = "postman2insomnia"

SUPPORTED_POSTMAN_SCHEMAS = ("2.0.0", "2.1.0")


def get_version_info() -> dict:
    return {
        "converter": CONVERTER_ID,
        "version": VERSION,
        "buildDate": BUILD_DATE,
        "postmanSchemas": list(SUPPORTED_POSTMAN_SCHEMAS),
        "insomniaFormat": INSOMNIA_COLLECTION_TYPE,
        "reportedAt": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }


def get_version_string() -> str:
    return f"{CONVERTER_ID} v{VERSION} ({BUILD_DATE})"
