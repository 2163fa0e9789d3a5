# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Service-role client
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Client built with the service-role key, or None when credentials are missing.
    Token checks, user metadata writes and the project/county tables all use it.
    """
    url = settings.SUPABASE_URL
    key = settings.SUPABASE_SERVICE_ROLE_KEY

    if not url or not key:
        logger.error(
            f"Supabase not configured (url={'set' if url else 'missing'}, "
            f"service key={'set' if key else 'missing'})"
        )
        return None

    try:
        return create_client(url, key)
    except Exception as e:
        logger.error(f"Supabase client creation failed: {e}", exc_info=True)
        return None


# ============================================================
# Health probe
# ============================================================

def ping_supabase() -> dict:
    """
    Read one row from the projects and counties tables.
    Status is "ok" when both answer, "degraded" when one fails.
    """
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    tables = {}
    for table in (settings.PROJECTS_TABLE, settings.COUNTIES_TABLE):
        try:
            res = client.table(table).select("id").limit(1).execute()
            tables[table] = {"status": "ok", "rows_found": len(res.data or [])}
        except Exception as e:
            logger.warning(f"Health check on '{table}' failed: {e}")
            tables[table] = {"status": "error", "detail": str(e)}

    healthy = all(t["status"] == "ok" for t in tables.values())
    return {
        "service": "Supabase",
        "status": "ok" if healthy else "degraded",
        "tables": tables,
    }
