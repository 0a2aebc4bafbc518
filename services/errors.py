"""
Service Errors

Exceptions raised by the service layer. Routes map them to HTTP status codes.
"""


class HouseholdError(Exception):
    """Base class for service-layer failures."""
    status_code = 500


class NotFoundError(HouseholdError):
    """Raised when a referenced weekly plan, recipe or ingredient does not exist."""
    status_code = 404


class ValidationError(HouseholdError):
    """Raised when request input is malformed."""
    status_code = 400


class PersistenceError(HouseholdError):
    """Raised when a database write fails."""
    status_code = 500
