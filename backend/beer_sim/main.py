from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from beer_sim.api.api_v1.api import api_router
from beer_sim.core.config import settings
from beer_sim.core.logging import setup_logging

logger = setup_logging("beer_sim")


def create_app() -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        return {
            "name": settings.PROJECT_NAME,
            "docs": "/docs",
            "time": datetime.now(timezone.utc).isoformat(),
        }

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    logger.info("%s %s ready (%s)", settings.PROJECT_NAME, settings.VERSION, settings.ENVIRONMENT)
    return app


app = create_app()
