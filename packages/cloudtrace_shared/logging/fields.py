"""Canonical logging field names.

Keeping names centralized keeps JSON log keys stable between the request
handlers, the persistence layer and the process lifecycle.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EXCEPTION = "exception"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
SERVER_HOSTNAME = "server_hostname"

# Request-scoped fields.
REQUEST_ID = "request_id"
CLIENT_IP = "client_ip"
HTTP_METHOD = "http_method"
HTTP_PATH = "http_path"

# Persistence fields.
ATTEMPT = "attempt"
MAX_ATTEMPTS = "max_attempts"
DELAY_MS = "delay_ms"
ERROR_CODE = "error_code"
OUTCOME = "outcome"
REGENERATIONS = "regenerations"
