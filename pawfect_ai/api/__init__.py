"""
API Package - FastAPI Routers

Routers are mounted under /api by pawfect_ai.main:
- sitters: trust score, profile analysis, availability
- slots: time-slot suggestions
- bookings: create, get, status, cancel, reschedule
- recommendations: ranked sitters with optional timing
"""

from pawfect_ai.api.router import api_router

# API Version
API_VERSION = "1.0.0"

__all__ = [
    "api_router",
    "API_VERSION",
]
