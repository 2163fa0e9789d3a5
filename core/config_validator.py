# core/config_validator.py

from typing import List
from core.config import settings
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """Problems that stop the service: Supabase credentials and import limits."""
    problems = []

    # Auth and both tenant tables go through the service-role client
    if not settings.SUPABASE_URL:
        problems.append("SUPABASE_URL is not set")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        problems.append("SUPABASE_SERVICE_ROLE_KEY is not set")

    if settings.IMPORT_MAX_UPLOAD_BYTES <= 0:
        problems.append("IMPORT_MAX_UPLOAD_BYTES must be positive")
    if settings.IMPORT_DATE_TOLERANCE_SECONDS < 0:
        problems.append("IMPORT_DATE_TOLERANCE_SECONDS must not be negative")

    return problems


def validate_optional_config() -> List[str]:
    warnings = []

    if not settings.SUPABASE_ANON_KEY:
        warnings.append("SUPABASE_ANON_KEY is not set")
    if not settings.BACKEND_CORS_ORIGINS:
        warnings.append("FRONTEND_ORIGINS is empty, browsers will be refused by CORS")

    return warnings


def validate_config_on_startup():
    """
    Run on startup. Required problems raise RuntimeError,
    except under ENV=test where they are only logged.
    """
    problems = validate_required_config()

    if problems:
        error_msg = "Invalid configuration: " + "; ".join(problems)
        if settings.ENV == "test":
            logger.warning(error_msg)
        else:
            logger.error(error_msg)
            raise RuntimeError(error_msg)

    for warning in validate_optional_config():
        logger.warning(f"Configuration warning: {warning}")

    logger.info(
        f"{settings.PROJECT_NAME} configured (env={settings.ENV}, "
        f"tables={settings.PROJECTS_TABLE}/{settings.COUNTIES_TABLE})"
    )
