"""
Application error hierarchy.

Services raise these; ``app.core.exception_handlers`` maps them onto the
JSON error envelope using ``status_code`` and ``code``.
"""


class AppError(Exception):
    status_code = 500
    code = "server_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"


class NotFound(AppError):
    status_code = 404
    code = "not_found"


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"


class EmptyCart(ValidationError):
    code = "empty_cart"


class ItemUnavailable(ValidationError):
    code = "item_unavailable"


class InsufficientStock(ValidationError):
    code = "insufficient_stock"


class Conflict(AppError):
    status_code = 409
    code = "conflict"


class InvalidStateTransition(AppError):
    status_code = 409
    code = "invalid_state_transition"


class PaymentFailed(AppError):
    status_code = 402
    code = "payment_failed"
