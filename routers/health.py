# routers/health.py

from fastapi import APIRouter
from core.config import settings
from core.supabase_client import ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Projects + counties tables reachable (no auth)
# -----------------------------------------------------
@router.get("/db", summary="Database health")
def health_db():
    status = ping_supabase()
    return {
        "service": "Supabase",
        "status": status["status"],
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health")
def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "env": settings.ENV,
        "status": "ok",
    }
