VERSION = "0.4.0"

DEFAULT_PROMPT = "QUERY"

# Seconds to wait for the continuation bytes of an escape sequence
ESC_TIMEOUT = 0.05

EXIT_NO_CHOICE = 2
EXIT_CANCELLED = 130
