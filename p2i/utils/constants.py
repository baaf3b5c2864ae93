"""
Constants for postman2insomnia.

Schema URLs, identifier prefixes, MIME types and document type tags shared
by the importer, the document builder and the command-line tool.
"""

# Recognised Postman collection schemas
POSTMAN_SCHEMA_URLS_V2_0 = [
    'https://schema.getpostman.com/json/collection/v2.0.0/collection.json',
    'https://schema.postman.com/json/collection/v2.0.0/collection.json',
]

POSTMAN_SCHEMA_URLS_V2_1 = [
    'https://schema.getpostman.com/json/collection/v2.1.0/collection.json',
    'https://schema.postman.com/json/collection/v2.1.0/collection.json',
]

# Postman environment scopes that convert to an Insomnia environment
POSTMAN_ENVIRONMENT_SCOPES = ['environment', 'globals']

# Parent id of every top-level record
WORKSPACE_ID_SENTINEL = '__WORKSPACE_ID__'

# Identifier prefixes (wrk=workspace, env=environment, jar=cookie jar,
# req=request, fld=folder / request group)
ID_PREFIXES = ['wrk', 'env', 'jar', 'req', 'fld']
ID_PATTERN = r'^(wrk|env|jar|req|fld)_[a-f0-9]{32}$'

# Record types
RECORD_TYPES = {
    'REQUEST': 'request',
    'REQUEST_GROUP': 'request_group',
    'WORKSPACE': 'workspace',
    'ENVIRONMENT': 'environment',
}

# Default names for unnamed items
DEFAULT_COLLECTION_NAME = 'Imported Collection'
DEFAULT_REQUEST_NAME = 'Imported Request'
DEFAULT_FOLDER_NAME = 'Imported Folder'
DEFAULT_ENVIRONMENT_NAME = 'Base Environment'
DEFAULT_COOKIE_JAR_NAME = 'Cookie Jar'
MERGED_COLLECTION_NAME = 'Merged Collection'

# Body MIME types
CONTENT_TYPES = {
    'JSON': 'application/json',
    'XML': 'application/xml',
    'PLAINTEXT': 'text/plain',
    'GRAPHQL': 'application/graphql',
    'FORM_DATA': 'multipart/form-data',
    'FORM_URLENCODED': 'application/x-www-form-urlencoded',
}

# Raw body language -> MIME type
RAW_LANGUAGE_CONTENT_TYPES = {
    'json': CONTENT_TYPES['JSON'],
    'xml': CONTENT_TYPES['XML'],
}

# Postman dynamic variables translated to Insomnia faker tags
FAKER_TAGS = ['guid', 'timestamp', 'randomInt']

# Insomnia v5 document type tags
INSOMNIA_COLLECTION_TYPE = 'collection.insomnia.rest/5.0'
INSOMNIA_ENVIRONMENT_TYPE = 'environment.insomnia.rest/5.0'

# Output formats and file naming
OUTPUT_FORMATS = ['yaml', 'json']
OUTPUT_SUFFIX = '.insomnia'
MERGED_OUTPUT_BASENAME = 'merged-collection'

# Default configuration paths
DEFAULT_CONFIG_PATH = "p2i_config.json"
DEFAULT_OUTPUT_DIR = "./output"
DEFAULT_OUTPUT_FORMAT = "yaml"

# Upper bound for fixpoint rule iteration
MAX_FIXPOINT_PASSES = 20
