"""FastAPI application entry point."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import health, route_plans
from .config import settings
from .services.outputs.routing_formatter import warning_to_json
from .services.routing.errors import PlanningError


async def planning_error_handler(request: Request, exc: PlanningError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error_kind": exc.error_kind,
            "message": exc.message,
            "warnings": [warning_to_json(warning) for warning in exc.warnings],
        },
    )


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, root_path="")
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_exception_handler(PlanningError, planning_error_handler)

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(route_plans.router, prefix=settings.api_prefix)
    return app


app = create_app()
