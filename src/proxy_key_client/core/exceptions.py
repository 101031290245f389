"""Exception classes for the proxy access-key client."""

from typing import Optional, Dict, Any


class ProxyKeyClientError(Exception):
    """Base exception for all access-key client errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize exception with message and optional details.
        
        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ProxyKeyClientError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(ProxyKeyClientError):
    """Raised when a caller passes an argument the API cannot accept."""
    
    def __init__(self, field: str, message: str, value: Any = None):
        """Initialize validation error.
        
        Args:
            field: Argument name that failed validation
            message: Validation error message
            value: The invalid value (optional)
        """
        full_message = f"Validation error for {field}: {message}"
        details = {'field': field, 'error': message}
        if value is not None:
            details['value'] = value
        super().__init__(full_message, details)


class HttpError(ProxyKeyClientError):
    """The server answered, but with a status the operation does not accept."""
    
    def __init__(self, status: int, operation: str = '', response_text: Optional[str] = None):
        """Initialize HTTP error.
        
        Args:
            status: HTTP status code returned by the server
            operation: Name of the operation that received it
            response_text: Response body text if available
        """
        message = f"HTTP {status}"
        if operation:
            message = f"{operation} failed with HTTP {status}"
        details: Dict[str, Any] = {'status_code': status}
        if response_text:
            details['response'] = response_text
        super().__init__(message, details)
        self.status = status
        self.response_text = response_text


class NoResponseError(ProxyKeyClientError):
    """The request was sent but no response came back."""
    
    def __init__(self, operation: str, reason: Optional[str] = None):
        """Initialize no-response error.
        
        Args:
            operation: Operation that did not get a response
            reason: Underlying transport failure, if known
        """
        message = f"No response for {operation}"
        if reason:
            message += f": {reason}"
        super().__init__(message, {'operation': operation, 'reason': reason})
        self.operation = operation
        self.reason = reason


class FingerprintMismatch(NoResponseError):
    """Raised when the server certificate does not match the pinned fingerprint."""
    
    def __init__(self, host: str, expected: str, actual: Optional[str]):
        """Initialize fingerprint mismatch.
        
        Args:
            host: Server hostname the connection was made to
            expected: Configured fingerprint
            actual: Fingerprint of the presented certificate, None if none was presented
        """
        super().__init__(f"connect {host}", "server certificate fingerprint mismatch")
        self.host = host
        self.expected = expected
        self.actual = actual
        self.details.update({'host': host, 'expected': expected, 'actual': actual})


class ServerError(ProxyKeyClientError):
    """A success status came back with a payload missing required fields."""
    
    def __init__(self, message: str, payload: Any = None):
        """Initialize server protocol error.
        
        Args:
            message: Description of what the payload lacked
            payload: The offending payload (optional)
        """
        details = {}
        if payload is not None:
            details['payload'] = payload
        super().__init__(message, details)
