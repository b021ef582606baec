"""Fixed values shared by the resolution and creation flows.

These are not user-configurable. Changing the marker prefix or the key
length makes cards created by earlier runs invisible to the duplicate check.
"""

# Color given to labels that are created on the fly.
DEFAULT_LABEL_COLOR = "morning-sky"

# Name of the task list that holds the subtasks of a created card.
DEFAULT_TASK_LIST_NAME = "Tasks"

# Position sent with every created list, label, card, task list and task.
# Planka orders siblings by position; the same value keeps creation order.
DEFAULT_POSITION = 65536

# Idempotency marker embedded in card descriptions:
#   "<description>\n\n[planka-cli:idempotency=<key>]"
IDEMPOTENCY_MARKER_PREFIX = "[planka-cli:idempotency="
IDEMPOTENCY_MARKER_SUFFIX = "]"

# Hex characters kept from the sha256 digest.
IDEMPOTENCY_KEY_LENGTH = 24

# Separator between the hashed fields.
IDEMPOTENCY_FIELD_SEPARATOR = "|"

# Language prefixes of locales that write numeric dates day-first.
DAY_FIRST_LOCALE_PREFIXES = ("de", "fr", "es", "it", "nl", "pt")

DEFAULT_LOCALE = "en-US"

# List picked by the interpret flow when the text names no list.
FALLBACK_INTERPRET_LIST_NAME = "open llm tasks"

# Seconds before an HTTP call to Planka is abandoned.
DEFAULT_HTTP_TIMEOUT = 15.0
