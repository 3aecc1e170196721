"""
API Routes Package.
"""

from toolplan.api.routes.health import router as health_router
from toolplan.api.routes.plans import router as plans_router

__all__ = ["health_router", "plans_router"]
