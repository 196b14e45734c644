"""
Constants Package

Centralized constants for the sitter trust and booking service.

Exports:
- Role constants (ADMIN, OWNER, SITTER, ANON)
- Threshold helpers (confidence_label)

Safe to import anywhere - no heavy dependencies or circular imports.
"""

# Role constants
from .roles import (
    ADMIN,
    OWNER,
    SITTER,
    ANON,
    ALL_ROLES,
    DEFAULT_ROLE,
    normalize_role,
)

# Threshold helpers
from .thresholds import confidence_label

__all__ = [
    "ADMIN",
    "OWNER",
    "SITTER",
    "ANON",
    "ALL_ROLES",
    "DEFAULT_ROLE",
    "normalize_role",
    "confidence_label",
]
