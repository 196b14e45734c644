"""
Central API Router

Aggregates the endpoint routers of the sitter trust and booking service.
"""

import importlib
import logging

from fastapi import APIRouter

logger = logging.getLogger(__name__)

# Main API router
api_router = APIRouter()

# Router modules under pawfect_ai.api, each exposing `router`
ROUTER_MODULES = [
    "sitters",
    "slots",
    "bookings",
    "recommendations",
]


def _include_router(module_name: str) -> None:
    module = importlib.import_module(f"pawfect_ai.api.{module_name}")
    api_router.include_router(module.router)
    logger.debug(f"Registered {module_name} router at {module.router.prefix}")


for module_name in ROUTER_MODULES:
    _include_router(module_name)

logger.info(f"API router initialized with {len(api_router.routes)} routes")
