"""
Routes module for the lead search API
API endpoints for AI search, refinement and ICP feedback
"""

from .search import router as search_router
from .icp import router as icp_router

__all__ = [
    "search_router",
    "icp_router"
]
