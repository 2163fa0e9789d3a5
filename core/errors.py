# core/errors.py

from fastapi import HTTPException


# ============================================================
# Domain exceptions
# ============================================================
class RealtyError(Exception):
    """Base class for errors that map onto a single HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RealtyError):
    """Missing or invalid input. Nothing was attempted."""

    status_code = 400


class MissingKeyColumnError(ValidationError):
    """No spreadsheet column maps onto the natural-key field."""

    def __init__(self, field: str = "name"):
        super().__init__(f'The file must contain a "{field}" column.')
        self.field = field


class NotFoundError(RealtyError):
    status_code = 404


class ParseError(RealtyError):
    status_code = 500


class MalformedFileError(ParseError):
    """The upload could not be decoded as a supported spreadsheet."""


class StorageError(RealtyError):
    status_code = 500


def to_http_exception(error: RealtyError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)


# ============================================================
# Supabase error helpers
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue / PostgREST APIError
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    return str(error) or error.__class__.__name__


def handle_supabase_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle Supabase errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to create project")
        status_code: HTTP status code (default 500)

    Returns:
        HTTPException with standardized error message
    """
    from core.logging_config import logger

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    # Provide user-friendly messages for common errors
    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")
