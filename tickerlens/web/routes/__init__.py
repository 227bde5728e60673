"""
Web API route modules.
"""

from tickerlens.web.metrics import router as metrics_router
from tickerlens.web.routes.analysis_routes import router as analysis_router
from tickerlens.web.routes.health_routes import router as health_router

__all__ = ["analysis_router", "health_router", "metrics_router"]
