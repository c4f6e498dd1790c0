"""
API v1 package.

Contains versioned API routes for the anonymous feedback API.
"""

from anonfeedback.api.v1.routes import router

__all__ = ["router"]
