from .helpers import (
    serialize_mongo_doc,
    success_response,
    error_response,
    parse_object_id,
    pagination_meta,
)
from .logger import Logger, configure_logging
from .exceptions import (
    AuthenticationError,
    NotFoundError,
    ValidationError,
    DuplicateError,
)

__all__ = [
    "serialize_mongo_doc",
    "success_response",
    "error_response",
    "parse_object_id",
    "pagination_meta",
    "Logger",
    "configure_logging",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "DuplicateError",
]
