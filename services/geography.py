# services/geography.py

from typing import Dict, Optional

from core.config import settings
from core.errors import StorageError, extract_supabase_error
from core.logging_config import logger
from core.utils import normalize_text


def load_county_index(client) -> Dict[str, dict]:
    """normalized county name → {"id", "name", "region_id"}."""
    try:
        result = (
            client.table(settings.COUNTIES_TABLE)
            .select("id, name, region_id")
            .execute()
        )
    except Exception as e:
        raise StorageError(f"Unable to load counties: {extract_supabase_error(e)}")

    index: Dict[str, dict] = {}
    for row in result.data or []:
        key = normalize_text(row.get("name"))
        if key and key not in index:
            index[key] = row

    logger.info(f"Loaded {len(index)} counties")
    return index


def resolve_county(index: Dict[str, dict], county_name) -> Optional[dict]:
    if not county_name:
        return None
    return index.get(normalize_text(county_name))


def geography_for(county: dict) -> dict:
    """Derived fields attached to new records once a county is resolved."""
    return {
        "county_id": county.get("id"),
        "region_id": county.get("region_id"),
    }
