"""Mail transport implementations."""

from .base import BaseTransport
from .mock import MockTransport
from .smtp import SMTPTransport

__all__ = ["BaseTransport", "MockTransport", "SMTPTransport"]
