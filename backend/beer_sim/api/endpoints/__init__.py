from .health import router as health_router
from .simulations import router as simulations_router
from .teams import router as teams_router

# Export all routers
__all__ = [
    'health_router',
    'simulations_router',
    'teams_router',
]
