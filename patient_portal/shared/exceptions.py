from typing import List, Optional


class PortalException(Exception):
    """Base class for every error raised by the portal client."""
    
    def __init__(self, detail: str = "Something went wrong"):
        super().__init__(detail)
        self.detail = detail


class ValidationError(PortalException):
    """Exception for client-side field validation, raised before any request."""
    
    def __init__(self, detail: str = "Invalid input", errors: Optional[List[str]] = None):
        super().__init__(detail)
        self.errors = errors or [detail]


class ApiError(PortalException):
    """
    Exception for a non-2xx response from the API.
    
    server_message holds the server's own error text, when it sent one.
    """
    
    def __init__(
        self,
        detail: str = "Request failed",
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
        details: Optional[List[str]] = None,
    ):
        super().__init__(server_message or detail)
        self.status_code = status_code
        self.server_message = server_message
        self.details = details or []


class AuthError(ApiError):
    """Exception for an expired session or rejected credentials."""
    
    def __init__(
        self,
        detail: str = "Could not validate credentials",
        status_code: Optional[int] = 401,
        server_message: Optional[str] = None,
        details: Optional[List[str]] = None,
    ):
        super().__init__(
            detail,
            status_code=status_code,
            server_message=server_message,
            details=details,
        )


class NetworkError(PortalException):
    """Exception for a request that never reached the server."""
    
    def __init__(self, detail: str = "API server is unreachable"):
        super().__init__(detail)
