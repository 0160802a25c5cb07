"""Static constants shared by the HTTP layer."""

PROJECT_NAME = "Emotions App API"
API_V1_STR = "/api/v1"
VERSION = "0.1.0"
SCHEMA_VERSION = "v1"

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
