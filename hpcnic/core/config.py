"""Built-in defaults for the command-line options."""

DEFAULT_MIN_SPEED = 200000  # 200G in Mbps
DEFAULT_INTERVAL = 300  # seconds
DEFAULT_WORKERS = 5
