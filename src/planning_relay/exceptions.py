"""Custom exceptions for the planning relay."""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base exception for all planning relay errors."""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = context or {}


class ConfigurationError(RelayError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(RelayError):
    """Raised when a batch request is missing required data or is malformed."""

    pass


class TransportError(RelayError):
    """Base class for mail transport failures.

    ``code`` is a short error class (``EAUTH``, ``ECONNECTION``...) and
    ``command`` the SMTP command that was in flight when it failed.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        command: Optional[str] = None,
        response_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause=cause)
        self.code = code
        self.command = command
        self.response_code = response_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "message": self.message,
            "code": self.code,
            "command": self.command,
        }


class ConnectivityError(TransportError):
    """Raised when the transport configuration cannot be verified."""

    pass


class SendError(TransportError):
    """Raised when a single message could not be delivered."""

    pass
