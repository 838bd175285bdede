"""
Error taxonomy for the store boundary.

Every failure talking to the backing store surfaces as a StoreError subclass
so the session can report it on its result channel without knowing which
adapter is plugged in.
"""

from typing import Optional


class StoreError(Exception):
    """Base class for backing-store failures."""
    pass


class StoreRequestError(StoreError):
    """Raised by the HTTP client when a request fails after all attempts."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AgentQueryError(StoreError):
    """Reading the agents table failed."""
    pass


class OrderQueryError(StoreError):
    """Reading the active order (with its joined references) failed."""
    pass


class UpdateError(StoreError):
    """Writing an order status failed, or matched no row."""
    pass
