# storefront/errors.py
"""Domain errors raised by the service layer.

Each error carries the HTTP status the API answers with, so routes can let
them propagate and the handler registered in ``main.py`` renders them.
"""


class StorefrontError(Exception):
    status_code = 400

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__ or self.__class__.__name__
        super().__init__(self.message)


class NotAuthenticated(StorefrontError):
    """User not authenticated"""
    status_code = 401


class PermissionDenied(StorefrontError):
    """Not allowed to modify this resource"""
    status_code = 403


class NotFound(StorefrontError):
    """Resource not found"""
    status_code = 404


class InvalidRequest(StorefrontError):
    """Invalid request"""
    status_code = 400


class InvalidTransition(StorefrontError):
    """Status change not allowed"""
    status_code = 409


class InsufficientInventory(StorefrontError):
    """Not enough quantity available"""
    status_code = 409

    def __init__(self, message: str = None, product_id=None, requested=None, available=None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(message)


class BackendError(StorefrontError):
    """Database operation failed"""
    status_code = 500
