"""Wire schema for incoming batch requests.

The HTTP body is decoded once here into an immutable
:class:`~planning_relay.models.NotificationBatchRequest`. Field names from the
original planning front-end (``pdfBuffer``, ``employees``, ``weekStartDate``)
are accepted alongside the descriptive ones (``document``, ``recipients``,
``periodStart``).
"""

import base64
import binascii
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .models import BatchKind, CustomContent, NotificationBatchRequest, Recipient

MODES = ("weekly", "monthly")


class RecipientPayload(BaseModel):
    """One entry of the recipient list."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    email: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _none_name_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_recipient(self) -> Recipient:
        return Recipient(name=self.name, email=self.email, extra=dict(self.model_extra or {}))


class CustomContentPayload(BaseModel):
    """Subject/body override for monthly plannings."""

    model_config = ConfigDict(populate_by_name=True)

    subject: str
    body_template: str = Field(validation_alias=AliasChoices("bodyTemplate", "body", "body_template"))
    period_label: str = Field(validation_alias=AliasChoices("periodLabel", "monthLabel", "period_label"))

    def to_content(self) -> CustomContent:
        return CustomContent(
            subject=self.subject,
            body_template=self.body_template,
            period_label=self.period_label,
        )


class BatchPayload(BaseModel):
    """JSON body of ``POST /send-planning``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    document: bytes = Field(validation_alias=AliasChoices("pdfBuffer", "document"))
    recipients: List[RecipientPayload] = Field(
        validation_alias=AliasChoices("employees", "recipients")
    )
    period_start: date = Field(
        validation_alias=AliasChoices("weekStartDate", "periodStart", "period_start")
    )
    mode: str = Field("weekly", validation_alias=AliasChoices("mode", "type"))
    # Left raw: only a monthly batch reads it
    override: Optional[Any] = Field(
        None, validation_alias=AliasChoices("override", "customEmail")
    )

    @field_validator("document", mode="before")
    @classmethod
    def _decode_document(cls, value: Any) -> bytes:
        # A Node Buffer serialised with JSON.stringify
        if isinstance(value, dict) and value.get("type") == "Buffer":
            value = value.get("data")

        if isinstance(value, list):
            try:
                data = bytes(value)
            except (TypeError, ValueError) as e:
                raise ValueError(f"document must be an array of bytes (0-255): {e}") from e
        elif isinstance(value, str):
            try:
                data = base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValueError(f"document is not valid base64: {e}") from e
        elif isinstance(value, (bytes, bytearray)):
            data = bytes(value)
        else:
            raise ValueError("document must be a byte array or a base64 string")

        if not data:
            raise ValueError("document is empty")
        return data

    @field_validator("period_start", mode="before")
    @classmethod
    def _date_part(cls, value: Any) -> Any:
        # Accept full ISO timestamps as sent by browsers, keep the calendar date
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @field_validator("mode", mode="before")
    @classmethod
    def _normalise_mode(cls, value: Any) -> str:
        if value is None:
            return "weekly"
        mode = str(value).strip().lower()
        if mode not in MODES:
            raise ValueError(f"mode must be one of {', '.join(MODES)}")
        return mode

    @property
    def kind(self) -> BatchKind:
        if self.mode == "monthly":
            if self.override is not None:
                return BatchKind.MONTHLY_CUSTOM
            return BatchKind.MONTHLY_DEFAULT
        return BatchKind.WEEKLY

    def custom_content(self) -> CustomContent:
        """Validate the override of a monthly batch."""
        return CustomContentPayload.model_validate(self.override).to_content()

    def to_request(self) -> NotificationBatchRequest:
        kind = self.kind
        override = self.custom_content() if kind is BatchKind.MONTHLY_CUSTOM else None
        return NotificationBatchRequest(
            document=self.document,
            recipients=tuple(r.to_recipient() for r in self.recipients),
            period_start=self.period_start,
            kind=kind,
            override=override,
        )


def _describe_errors(error: PydanticValidationError, prefix: Tuple[str, ...] = ()) -> str:
    missing = []
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in prefix + tuple(detail["loc"]))
        if detail["type"] == "missing":
            missing.append(location)
        else:
            problems.append(f"{location}: {detail['msg']}")

    parts = []
    if missing:
        parts.append(f"Missing required field(s): {', '.join(missing)}")
    parts.extend(problems)
    return "; ".join(parts)


def parse_batch_request(payload: Any) -> NotificationBatchRequest:
    """Validate a decoded JSON body and build the batch request.

    Args:
        payload: Decoded JSON body

    Returns:
        Immutable batch request

    Raises:
        ValidationError: If required data is missing or malformed
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        batch = BatchPayload.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(_describe_errors(e), cause=e) from e

    try:
        return batch.to_request()
    except PydanticValidationError as e:
        raise ValidationError(_describe_errors(e, prefix=("customEmail",)), cause=e) from e


def summarize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Sizes of the interesting parts of a raw payload, for logging."""
    document = payload.get("pdfBuffer", payload.get("document"))
    recipients = payload.get("employees", payload.get("recipients"))
    return {
        "document_length": len(document) if isinstance(document, (list, str)) else None,
        "recipients_count": len(recipients) if isinstance(recipients, list) else None,
        "period_start": payload.get("weekStartDate", payload.get("periodStart")),
    }
