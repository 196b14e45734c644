"""
Role Constants

User role strings used by the booking lifecycle to authorize status changes.

Roles:
- ADMIN: May act on any booking
- OWNER: Pet owner, party to their own bookings
- SITTER: Pet sitter, party to bookings assigned to them
- ANON: Unauthenticated callers (no booking rights)
"""

from typing import Optional

# ============================================================================
# Role Constants
# ============================================================================

ADMIN = "ADMIN"
OWNER = "OWNER"
SITTER = "SITTER"
ANON = "ANON"

# All valid roles
ALL_ROLES = {ADMIN, OWNER, SITTER, ANON}

# Default role for missing/invalid input
DEFAULT_ROLE = ANON


# ============================================================================
# Helper Functions
# ============================================================================

def normalize_role(role: Optional[str]) -> str:
    """
    Normalize role string to uppercase, return DEFAULT_ROLE if invalid.

    Example:
        >>> normalize_role("admin")
        'ADMIN'
        >>> normalize_role(None)
        'ANON'
    """
    if not role or not isinstance(role, str):
        return DEFAULT_ROLE

    normalized = role.strip().upper()

    if normalized in ALL_ROLES:
        return normalized

    return DEFAULT_ROLE
