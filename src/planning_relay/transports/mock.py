"""Mock transport for tests and dry runs."""

import itertools
from typing import Iterable, List, Optional

from ..exceptions import ConnectivityError, SendError
from ..models import OutgoingMessage, SendReceipt
from .base import BaseTransport


class MockTransport(BaseTransport):
    """Transport that records messages instead of sending them."""

    def __init__(
        self,
        sender: str = "planning@example.com",
        fail_for: Iterable[str] = (),
        verify_error: Optional[ConnectivityError] = None,
    ):
        """Initialize the mock transport.

        Args:
            sender: Default sender email address
            fail_for: Recipient addresses whose sends are rejected
            verify_error: Error raised by verify(), if any
        """
        super().__init__(sender)
        self.fail_for = set(fail_for)
        self.verify_error = verify_error
        self.sent: List[OutgoingMessage] = []
        self.attempts: List[str] = []
        self._ids = itertools.count(1)

    async def verify(self) -> None:
        if self.verify_error is not None:
            raise self.verify_error

    async def send(self, message: OutgoingMessage) -> SendReceipt:
        self.attempts.append(message.recipient)
        if message.recipient in self.fail_for:
            raise SendError(
                f"Recipient address rejected: {message.recipient}",
                code="EENVELOPE",
                command="RCPT TO",
                response_code=550,
            )
        self.sent.append(message)
        return SendReceipt(message_id=f"<mock-{next(self._ids)}@planning-relay>")
