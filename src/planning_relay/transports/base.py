"""Base mail transport interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..models import OutgoingMessage, SendReceipt


class BaseTransport(ABC):
    """Abstract base class for mail transports."""

    def __init__(self, sender: str):
        """Initialize the transport.

        Args:
            sender: Default sender email address
        """
        self.sender = sender

    @abstractmethod
    async def verify(self) -> None:
        """Check that the transport is configured and reachable.

        Raises:
            ConnectivityError: If the server cannot be reached or rejects the login
        """
        pass

    @abstractmethod
    async def send(self, message: OutgoingMessage) -> SendReceipt:
        """Send one message.

        Args:
            message: Message to send

        Returns:
            SendReceipt with the message id

        Raises:
            SendError: If the message was not accepted
        """
        pass

    def describe(self) -> Dict[str, Any]:
        """Non-secret description of the transport, for diagnostics."""
        return {"transport": type(self).__name__, "sender": self.sender}
