# API endpoints and routers

from .health_endpoints import router as health_router
from .task_endpoints import router as task_router
from .vision_endpoints import router as vision_router

__all__ = [
    "health_router",
    "task_router",
    "vision_router",
]
