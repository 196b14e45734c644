"""
Core Package

Centralized configuration, logging and error handling.

Modules:
- config: Environment configuration and settings
- logging: Structured logging with trace_id support
- errors: Error taxonomy and HTTP conversion

Usage:
    from pawfect_ai.core import settings, setup_logging, set_trace_id
    from pawfect_ai.core import ValidationError, ConflictError
"""

# Configuration
from pawfect_ai.core.config import settings, get_settings

# Logging
from pawfect_ai.core.logging import (
    setup_logging,
    set_trace_id,
    get_trace_id
)

# Errors
from pawfect_ai.core.errors import (
    AppError,
    ValidationError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    InvalidTransitionError,
    DataUnavailableError,
    ExternalSignalUnavailableError,
    error_payload,
    to_http_exception
)

__all__ = [
    # Config
    "settings",
    "get_settings",

    # Logging
    "setup_logging",
    "set_trace_id",
    "get_trace_id",

    # Errors
    "AppError",
    "ValidationError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "InvalidTransitionError",
    "DataUnavailableError",
    "ExternalSignalUnavailableError",
    "error_payload",
    "to_http_exception",
]
