"""Fan-out of a planning batch to its recipients."""

import asyncio
import logging
from typing import Any, List, Optional

from .content import BatchContent, resolve_content
from .exceptions import SendError
from .models import (
    Attachment,
    DispatchOutcome,
    NotificationBatchRequest,
    OutgoingMessage,
    Recipient,
    SendReceipt,
)
from .schemas import parse_batch_request
from .transports.base import BaseTransport
from .validators import validate_email_address

logger = logging.getLogger(__name__)

TEST_SUBJECT = "Test de configuration email"
TEST_BODY = "Si vous recevez cet email, la configuration SMTP fonctionne correctement."


class NotificationDispatcher:
    """Sends one batch to every recipient that has an email address."""

    def __init__(self, transport: BaseTransport, validate_addresses: bool = True):
        """Initialize the dispatcher.

        Args:
            transport: Mail transport shared by all sends
            validate_addresses: Reject malformed addresses without contacting
                the transport
        """
        self.transport = transport
        self.validate_addresses = validate_addresses

    async def dispatch_payload(self, payload: Any) -> List[DispatchOutcome]:
        """Validate a decoded JSON body and dispatch it.

        Raises:
            ValidationError: If the payload is incomplete; nothing is sent
        """
        return await self.dispatch(parse_batch_request(payload))

    async def dispatch(self, request: NotificationBatchRequest) -> List[DispatchOutcome]:
        """Send the batch document to every eligible recipient.

        All sends run concurrently and are awaited until every one has
        settled. A failure for one recipient never prevents the others.

        Args:
            request: Validated batch request

        Returns:
            One outcome per recipient with an email, in input order
        """
        content = resolve_content(request)
        eligible = request.eligible_recipients
        attachment = Attachment(filename=content.filename, content=request.document)

        logger.info(
            f"Dispatching '{content.subject}' ({request.kind.value}): "
            f"{len(eligible)}/{len(request.recipients)} recipients with email, "
            f"document {len(request.document)} bytes"
        )

        results = await asyncio.gather(
            *(self._send_one(recipient, content, attachment) for recipient in eligible),
            return_exceptions=True,
        )

        outcomes = []
        for recipient, result in zip(eligible, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Unexpected error sending to {recipient.email}: {result!r}",
                    exc_info=result,
                )
                result = DispatchOutcome.failed(recipient, str(result) or type(result).__name__)
            outcomes.append(result)

        sent = sum(1 for outcome in outcomes if outcome.success)
        logger.info(f"Batch complete: {sent} sent, {len(outcomes) - sent} failed")
        return outcomes

    async def _send_one(
        self, recipient: Recipient, content: BatchContent, attachment: Attachment
    ) -> DispatchOutcome:
        address = recipient.email.strip()

        if self.validate_addresses:
            is_valid, detail = validate_email_address(address)
            if not is_valid:
                logger.warning(f"Skipping send to invalid address {address}: {detail}")
                return DispatchOutcome.failed(recipient, f"Invalid email address: {detail}")

        message = OutgoingMessage(
            sender=self.transport.sender,
            recipient=address,
            subject=content.subject,
            text_body=content.body_for(recipient.name),
            attachments=[attachment],
        )

        logger.debug(f"Sending planning to {address}")
        try:
            receipt = await self.transport.send(message)
        except SendError as e:
            logger.error(f"Failed to send planning to {address}: {e.message}")
            return DispatchOutcome.failed(recipient, e.message)

        logger.info(f"Planning sent to {address} (message_id: {receipt.message_id})")
        return DispatchOutcome.succeeded(recipient, receipt.message_id)

    async def send_test_email(self, recipient: Optional[str] = None) -> SendReceipt:
        """Verify the transport and send a diagnostic message.

        Args:
            recipient: Destination address (defaults to the sender itself)

        Returns:
            SendReceipt of the diagnostic message

        Raises:
            ConnectivityError: If the transport cannot be verified
            SendError: If the diagnostic message is rejected
        """
        await self.transport.verify()

        message = OutgoingMessage(
            sender=self.transport.sender,
            recipient=recipient or self.transport.sender,
            subject=TEST_SUBJECT,
            text_body=TEST_BODY,
        )
        receipt = await self.transport.send(message)
        logger.info(f"Test email sent to {message.recipient} (message_id: {receipt.message_id})")
        return receipt
