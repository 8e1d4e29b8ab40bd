"""Shared constants for uploader modules.

These mirror the defaults in :class:`artisync.core.config.UploadSettings`.
"""

# =============================================================================
# Batch Upload Defaults
# =============================================================================

# Requests in flight at once
DEFAULT_UPLOAD_CONCURRENCY = 15

# Retry rounds after the first one
DEFAULT_MAX_RETRIES = 5

# Backoff before retry round k is BASE * 2**k seconds, capped at MAX
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 16.0

# =============================================================================
# Single-File Upload Defaults
# =============================================================================

# Total attempts including the first one
DEFAULT_FILE_ATTEMPTS = 5

# Fixed wait between attempts, seconds
DEFAULT_FILE_RETRY_DELAY = 1.0

# Bytes read from disk per streamed chunk
DEFAULT_STREAM_CHUNK_SIZE = 64 * 1024

# Status codes at or above this value count as failures
FAILURE_STATUS_THRESHOLD = 400
