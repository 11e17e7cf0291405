"""
Error taxonomy for the data-access layer.

Every FleetError carries the message shown to the actor and the HTTP status the
API maps it to. Local failures (validation, references, uniqueness, dependents)
are raised before any remote call. StoreError and MappingError stay internal:
repositories translate them at their boundary.
"""

from typing import List, Optional

from fleet_ledger.utils.messages import t


class FleetError(Exception):
    status_code = 400
    code = "fleet_error"

    def __init__(self, user_message: str, details: Optional[str] = None):
        super().__init__(details or user_message)
        self.user_message = user_message


class ValidationError(FleetError):
    status_code = 422
    code = "validation_error"

    def __init__(self, user_message: str, errors: Optional[List[str]] = None):
        super().__init__(user_message, "; ".join(errors or []) or None)
        self.errors = list(errors or [])


class ReferentialIntegrityError(FleetError):
    status_code = 422
    code = "referential_integrity"


class UniquenessViolation(FleetError):
    status_code = 409
    code = "uniqueness_violation"


class DependencyExistsError(FleetError):
    status_code = 409
    code = "dependency_exists"


class NotFoundError(FleetError):
    status_code = 404
    code = "not_found"


class NotAuthenticatedError(FleetError):
    status_code = 401
    code = "not_authenticated"


class ExportError(FleetError):
    status_code = 400
    code = "export_error"


# ── Remote store failures ──────────────────────────────────────────────────

DUPLICATE_KEY = "duplicate_key"
FOREIGN_KEY = "foreign_key"
PERMISSION_DENIED = "permission_denied"
GENERIC = "generic"

_CATEGORY_STATUS = {DUPLICATE_KEY: 409, FOREIGN_KEY: 409, PERMISSION_DENIED: 403, GENERIC: 502}

# PostgreSQL SQLSTATE codes reported by the store
_SQLSTATE_CATEGORY = {"23505": DUPLICATE_KEY, "23503": FOREIGN_KEY, "42501": PERMISSION_DENIED}


class StoreError(Exception):
    """Raised by a store implementation; `code` is a SQLSTATE-like string."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(f"[{code}] {message}" if message else code)
        self.code = code
        self.message = message


class MappingError(ValueError):
    """A wire record is structurally unusable and must be dropped."""


class RemoteError(FleetError):
    code = "remote_error"

    def __init__(self, category: str, user_message: str, details: Optional[str] = None):
        super().__init__(user_message, details)
        self.category = category
        self.status_code = _CATEGORY_STATUS.get(category, 502)


class RemoteWriteError(RemoteError):
    code = "remote_write_error"


class RemoteReadError(RemoteError):
    code = "remote_read_error"


def store_error_category(error: StoreError) -> str:
    category = _SQLSTATE_CATEGORY.get(error.code)
    if category:
        return category
    if "RLS" in (error.message or ""):
        return PERMISSION_DENIED
    return GENERIC


def remote_error_from(error: StoreError, cls=RemoteWriteError) -> RemoteError:
    """Map a store failure to the category-specific error shown to the actor."""
    category = store_error_category(error)
    return cls(category, t(f"remote_{category}"), str(error))


class AuditWriteFailure(Exception):
    """Both audit paths failed. Logged inside the audit logger, never propagated."""
