"""Subject, body and attachment name for a planning batch.

Two policies exist. A monthly batch with custom content uses the caller's
subject and body; every other batch gets the weekly wording built from the
period start date.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from .models import BatchKind, NotificationBatchRequest

NAME_PLACEHOLDER = "{name}"

WEEKLY_SUBJECT = "Planning du {start} au {end}"
WEEKLY_BODY = (
    "Bonjour {name},\n\n"
    "Veuillez trouver ci-joint votre planning pour la semaine du {start} au {end}.\n\n"
    "Cordialement,"
)
WEEKLY_FILENAME = "planning_{start}_{end}.pdf"
MONTHLY_FILENAME = "planning_mensuel_{label}.pdf"

WEEK_LENGTH = timedelta(days=6)


@dataclass(frozen=True)
class BatchContent:
    """Text shared by every message of a batch."""

    subject: str
    filename: str
    body_template: str

    def body_for(self, name: str) -> str:
        """Personalise the body for one recipient."""
        return self.body_template.replace(NAME_PLACEHOLDER, name)


def format_short_date(value: date) -> str:
    """Format a date the way fr-FR short dates read (DD/MM/YYYY)."""
    return value.strftime("%d/%m/%Y")


def weekly_content(period_start: date) -> BatchContent:
    start = format_short_date(period_start)
    end = format_short_date(period_start + WEEK_LENGTH)
    return BatchContent(
        subject=WEEKLY_SUBJECT.format(start=start, end=end),
        filename=WEEKLY_FILENAME.format(start=start, end=end),
        # {name} stays in place for body_for()
        body_template=WEEKLY_BODY.format(name=NAME_PLACEHOLDER, start=start, end=end),
    )


def resolve_content(request: NotificationBatchRequest) -> BatchContent:
    """Derive subject, body template and filename for a batch.

    Args:
        request: Batch request

    Returns:
        BatchContent shared by all recipients of the batch
    """
    if request.kind is BatchKind.MONTHLY_CUSTOM:
        override = request.override
        return BatchContent(
            subject=override.subject,
            filename=MONTHLY_FILENAME.format(label=override.period_label.lower()),
            body_template=override.body_template,
        )

    return weekly_content(request.period_start)
