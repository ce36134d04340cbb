"""HTTP relay that emails rendered plannings to employees."""

__version__ = "0.1.0"

from .exceptions import (
    RelayError,
    ConfigurationError,
    ValidationError,
    TransportError,
    ConnectivityError,
    SendError,
)
from .models import (
    BatchKind,
    Recipient,
    CustomContent,
    NotificationBatchRequest,
    DispatchOutcome,
)
from .content import resolve_content
from .schemas import parse_batch_request
from .dispatcher import NotificationDispatcher
from .transports import BaseTransport, MockTransport, SMTPTransport
from .app import create_app

__all__ = [
    "RelayError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "ConnectivityError",
    "SendError",
    "BatchKind",
    "Recipient",
    "CustomContent",
    "NotificationBatchRequest",
    "DispatchOutcome",
    "resolve_content",
    "parse_batch_request",
    "NotificationDispatcher",
    "BaseTransport",
    "MockTransport",
    "SMTPTransport",
    "create_app",
]
