"""Canonical logging field names shared by searchjobs packages.

Keeping names centralized prevents drift between the SDK, the event writer,
and the CLI when logs are shipped as structured JSON.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Operation invocation fields.
OPERATION = "operation"
OPERATION_INVOCATION_EVENT = "operation_invocation"
OPERATION_COMPLETION_EVENT = "operation_completion"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERROR_CODE = "error_code"
ERRORS = "errors"

# Search job fields.
SID = "sid"
DISPATCH_STATE = "dispatch_state"
TARGET_STATE = "target_state"
POLL_ATTEMPT = "poll_attempt"
POLL_DELAY_SECONDS = "poll_delay_seconds"

# Event stream fields.
EVENT_COUNT = "event_count"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
