"""Project-wide named constants.

Defaults for the palette engine. Each can be overridden through
``config/palette.json`` (see ``tunepalette.config``).
"""

# One outbound search per debounce window regardless of keystroke rate.
DEBOUNCE_SECONDS: float = 0.25

# Recency store: persisted capacity vs. how many are shown on an empty query.
RECENT_CAPACITY: int = 10
RECENT_DISPLAY_LIMIT: int = 8

# Bucket caps bound render cost. Exact matches fill MAX_RESULTS first.
MAX_EXACT: int = 5
MAX_RECOMMENDATIONS: int = 10
MAX_RESULTS: int = 12

# Remote catalog: items requested per result type, retry attempts after
# the first failure, and the per-request timeout.
SEARCH_LIMIT: int = 5
SEARCH_RETRIES: int = 1
SEARCH_TIMEOUT_SECONDS: float = 10.0

# Upper bound on a server-requested Retry-After wait; longer waits fail fast
# so the palette never sits in a loading state for minutes.
MAX_RETRY_AFTER_SECONDS: float = 5.0

DEFAULT_DB_PATH = "data/palette.db"
DEFAULT_LOG_DIR = "logs"
DEFAULT_API_BASE_URL = "https://api.spotify.com/v1"
DEFAULT_AUTH_URL = "https://accounts.spotify.com/api/token"
