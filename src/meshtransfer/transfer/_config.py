"""
Configuration constants for the transfer engine.
"""

# Maximum uncompressed bytes per chunk
CHUNK_SIZE = 10 * 1024 * 1024  # 10MB

# Timeout for each individual HTTP request
DEFAULT_REQUEST_TIMEOUT = 10.0  # seconds

# Upload metadata defaults
DEFAULT_WORKFLOW_ID = "API-DOCS-TEST"
DEFAULT_FILENAME = "message.txt.gz"

# Status codes
STATUS_OK = 200
STATUS_ACCEPTED = 202
STATUS_PARTIAL_CONTENT = 206

# Wire metadata
HEADER_CHUNK_RANGE = "mex-chunk-range"
HEADER_FROM = "mex-from"
HEADER_TO = "mex-to"
HEADER_WORKFLOW_ID = "mex-workflowid"
HEADER_FILENAME = "mex-filename"
HEADER_CONTENT_ENCODING = "content-encoding"
HEADER_CONTENT_TYPE = "content-type"

CONTENT_ENCODING_GZIP = "gzip"
CONTENT_TYPE_OCTET_STREAM = "application/octet-stream"

# Operation names used in diagnostics
OP_SEND_CHUNKS = "sendMessageChunks"
OP_READ_MESSAGE = "readMessage"
OP_LIST_MESSAGES = "getMessages"
