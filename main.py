import os
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.errors import RealtyError
from core.logging_config import logger

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.roles import router as roles_router
from routers.users import router as users_router

from routers.project_imports import router as project_imports_router
from routers.project_exports import router as project_exports_router
from routers.projects import router as projects_router

from routers.health import router as health_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Realty Sales API: permissions, projects and spreadsheet reconciliation",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"Starting {settings.PROJECT_NAME} (env={settings.ENV})")
        validate_config_on_startup()
        for route in app.routes:
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.debug(f"Route {methods:10s} {route.path}")

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(RealtyError)
    async def handle_realty(request: Request, exc: RealtyError):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} at {request.url}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url}: {exc.detail}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Access control
    app.include_router(roles_router)
    app.include_router(users_router)

    # Projects (import/export before the /projects/{id} routes)
    app.include_router(project_imports_router)
    app.include_router(project_exports_router)
    app.include_router(projects_router)

    # Health
    app.include_router(health_router)

    return app


# Create the global FastAPI instance
app = create_app()
