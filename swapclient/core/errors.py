from typing import Optional


class SwapClientError(Exception):
    """Base class for every error raised by the client."""

    pass


class InvalidArgument(SwapClientError, ValueError):
    """Raised for a side outside BID/ASK or a non-positive price."""

    pass


class OrderFailed(SwapClientError):
    """Raised when a watched order reaches the FAILED state."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} is in a FAILED state.")


class RemoteUnavailable(SwapClientError):
    """The broker could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class DeadlineExceeded(RemoteUnavailable):
    """A remote call did not finish within its deadline."""

    pass


class AuthConfigMissing(SwapClientError):
    """Authentication is enabled but a username or password is missing."""

    pass
