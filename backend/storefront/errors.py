from enum import Enum


class ErrorType(Enum):
    NOT_FOUND = "not_found"
    INVALID_CRITERIA = "invalid_criteria"
    STORE_UNAVAILABLE = "store_unavailable"
    INTERNAL_ERROR = "internal_error"


# Map error types to HTTP status codes
ERROR_STATUS_MAP = {
    ErrorType.NOT_FOUND: 404,
    ErrorType.INVALID_CRITERIA: 400,
    ErrorType.STORE_UNAVAILABLE: 503,
    ErrorType.INTERNAL_ERROR: 500,
}
