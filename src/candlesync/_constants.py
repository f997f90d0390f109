"""Internal constants shared across the library."""

BASE_URL = "https://api.github.com/gists"
DEFAULT_FILENAME = "candles.json"
ACCEPT_HEADER = "application/vnd.github+json"
USER_AGENT = "candlesync"

#: Seconds between poll ticks (the web app polled every 1000 ms).
DEFAULT_POLL_INTERVAL: float = 1.0

#: Indentation used when serializing the item array into the file content.
CONTENT_INDENT = 2
