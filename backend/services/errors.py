# backend/services/errors.py
"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; ``main.py`` turns them into
``{"detail": ...}`` responses so routes and services never build responses
for these cases themselves.
"""


class CatalogError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInputError(CatalogError):
    """A required field is missing or malformed."""
    status_code = 400
    default_detail = "Invalid input"


class NotFoundError(CatalogError):
    status_code = 404
    default_detail = "Not found"


class ConflictError(CatalogError):
    status_code = 409
    default_detail = "Already exists"


class ForbiddenError(CatalogError):
    """Caller is not the owner of the resource or lacks the admin role."""
    status_code = 403
    default_detail = "Forbidden"


class StoreError(CatalogError):
    status_code = 503
    default_detail = "Database unavailable. Please try again later."
