from fastapi import APIRouter

from beer_sim.api.endpoints import health_router, simulations_router, teams_router

api_router = APIRouter()

# Include API routes
api_router.include_router(health_router, tags=["health"])
api_router.include_router(teams_router, tags=["teams"])
api_router.include_router(simulations_router, tags=["simulations"])
