"""Domain errors raised by the service layer.

Services raise these; the HTTP layer maps them to status codes in ``main.py``.
"""


class PharmacyError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PharmacyError, LookupError):
    status_code = 404


class InsufficientStockError(PharmacyError, ValueError):
    status_code = 400

    def __init__(self, message: str, available: int | None = None, requested: int | None = None):
        super().__init__(message)
        self.available = available
        self.requested = requested


class InvalidInputError(PharmacyError, ValueError):
    status_code = 400


class PermissionDeniedError(PharmacyError):
    status_code = 403
