"""Data models for the planning relay."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class BatchKind(str, Enum):
    """Which content policy applies to a batch."""

    WEEKLY = "weekly"
    MONTHLY_DEFAULT = "monthly_default"
    MONTHLY_CUSTOM = "monthly_custom"


@dataclass(frozen=True)
class Recipient:
    """A person the planning is sent to.

    ``extra`` keeps any additional fields the client sent so they can be
    echoed back in the dispatch outcome.
    """

    name: str
    email: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {**self.extra, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class CustomContent:
    """Caller-supplied subject and body for a monthly batch."""

    subject: str
    body_template: str
    period_label: str


@dataclass(frozen=True)
class NotificationBatchRequest:
    """A document to send to a list of recipients."""

    document: bytes
    recipients: Tuple[Recipient, ...]
    period_start: date
    kind: BatchKind = BatchKind.WEEKLY
    override: Optional[CustomContent] = None

    def __post_init__(self):
        if self.kind is BatchKind.MONTHLY_CUSTOM and self.override is None:
            raise ValueError("A monthly custom batch requires custom content")
        if self.kind is not BatchKind.MONTHLY_CUSTOM and self.override is not None:
            raise ValueError(f"Custom content is not allowed for a {self.kind.value} batch")

    @property
    def eligible_recipients(self) -> List[Recipient]:
        """Recipients that have an email address, in input order."""
        return [recipient for recipient in self.recipients if recipient.has_email]


@dataclass(frozen=True)
class Attachment:
    """A file attached to an outgoing message."""

    filename: str
    content: bytes
    mimetype: str = "application/pdf"


@dataclass
class OutgoingMessage:
    """A single email handed to a transport."""

    sender: str
    recipient: str
    subject: str
    text_body: str
    attachments: List[Attachment] = field(default_factory=list)


@dataclass(frozen=True)
class SendReceipt:
    """What a transport reports back after accepting a message."""

    message_id: Optional[str] = None
    response: Optional[str] = None


@dataclass
class DispatchOutcome:
    """Result of sending the planning to one recipient."""

    recipient: Recipient
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def succeeded(cls, recipient: Recipient, message_id: Optional[str]) -> "DispatchOutcome":
        return cls(recipient=recipient, success=True, message_id=message_id)

    @classmethod
    def failed(cls, recipient: Recipient, error_message: str) -> "DispatchOutcome":
        return cls(recipient=recipient, success=False, error_message=error_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape returned by the HTTP API."""
        data: Dict[str, Any] = {
            "success": self.success,
            "employee": self.recipient.to_dict(),
        }
        if self.success:
            data["messageId"] = self.message_id
        else:
            data["error"] = self.error_message
        return data
