"""CLI commands for the planning relay."""

import asyncio
import base64
import json
import logging
import sys
from typing import Optional

import click

from .app import create_app
from .config import load_settings
from .dispatcher import NotificationDispatcher
from .exceptions import RelayError, TransportError
from .logging import setup_logging
from .transports.mock import MockTransport
from .transports.smtp import SMTPTransport

logger = logging.getLogger(__name__)


@click.group()
@click.option("--env-file", type=click.Path(exists=True), help=".env file path")
@click.option("--config", "config_file", type=click.Path(exists=True), help="Config file path (YAML/JSON)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Log level (overrides LOG_LEVEL)",
)
@click.pass_context
def main(ctx, env_file: Optional[str], config_file: Optional[str], log_level: Optional[str]):
    """Planning relay: email rendered plannings to employees."""
    try:
        settings = load_settings(env_file=env_file, config_file=config_file)
    except RelayError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if log_level:
        settings.logging.level = log_level.upper()
    setup_logging(settings=settings)

    ctx.obj = settings


@main.command()
@click.option("--host", default=None, help="Interface to bind (overrides HOST)")
@click.option("--port", type=int, default=None, help="Listen port (overrides PORT)")
@click.pass_obj
def serve(settings, host: Optional[str], port: Optional[int]):
    """Run the HTTP server."""
    transport = SMTPTransport.from_settings(settings)

    try:
        asyncio.run(transport.verify())
    except TransportError as e:
        # The server still starts; /test-email reports the details
        logger.error(f"SMTP configuration error: {e.message}")

    app = create_app(settings=settings, transport=transport)

    host = host or settings.server.host
    port = port or settings.server.port
    click.echo(f"Server running on {host}:{port}")
    app.run(host=host, port=port)


@main.command()
@click.pass_obj
def verify(settings):
    """Check the SMTP configuration."""
    transport = SMTPTransport.from_settings(settings)
    try:
        asyncio.run(transport.verify())
    except TransportError as e:
        click.echo(f"Error: {e.message} (code={e.code}, command={e.command})", err=True)
        sys.exit(1)

    click.echo(f"SMTP server {settings.smtp.host}:{settings.smtp.port} is ready")


@main.command("test-email")
@click.option("--to", "recipient", default=None, help="Recipient (defaults to the sender)")
@click.pass_obj
def test_email(settings, recipient: Optional[str]):
    """Send a diagnostic email."""
    dispatcher = NotificationDispatcher(SMTPTransport.from_settings(settings))
    try:
        receipt = asyncio.run(dispatcher.send_test_email(recipient))
    except TransportError as e:
        click.echo(json.dumps({"success": False, "error": e.to_dict()}), err=True)
        sys.exit(1)

    click.echo(json.dumps({"success": True, "messageId": receipt.message_id}))


@main.command()
@click.option("--document", type=click.Path(exists=True, dir_okay=False), required=True, help="PDF to attach")
@click.option("--recipients", type=click.Path(exists=True, dir_okay=False), required=True, help="Recipients (JSON list of {name, email})")
@click.option("--start", required=True, help="Period start date (YYYY-MM-DD)")
@click.option("--mode", type=click.Choice(["weekly", "monthly"]), default="weekly", help="Planning type")
@click.option("--subject", default=None, help="Custom subject (monthly only)")
@click.option("--body", default=None, help="Custom body, {name} is replaced (monthly only)")
@click.option("--period-label", default=None, help="Period label for the file name (monthly only)")
@click.option("--dry-run", is_flag=True, help="Do not send, print what would be sent")
@click.pass_obj
def send(
    settings,
    document: str,
    recipients: str,
    start: str,
    mode: str,
    subject: Optional[str],
    body: Optional[str],
    period_label: Optional[str],
    dry_run: bool,
):
    """Send a planning document to a list of recipients."""
    with open(document, "rb") as f:
        document_data = f.read()
    with open(recipients, "r") as f:
        recipient_data = json.load(f)

    payload = {
        "document": base64.b64encode(document_data).decode("ascii"),
        "recipients": recipient_data,
        "periodStart": start,
        "mode": mode,
    }
    custom = (subject, body, period_label)
    if any(custom):
        if not all(custom):
            click.echo("Error: --subject, --body and --period-label go together", err=True)
            sys.exit(1)
        payload["override"] = {"subject": subject, "body": body, "periodLabel": period_label}

    if dry_run:
        transport = MockTransport(sender=settings.smtp.sender)
    else:
        transport = SMTPTransport.from_settings(settings)
    dispatcher = NotificationDispatcher(transport)

    try:
        outcomes = asyncio.run(dispatcher.dispatch_payload(payload))
    except RelayError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps([outcome.to_dict() for outcome in outcomes], indent=2, ensure_ascii=False))
    if not all(outcome.success for outcome in outcomes):
        sys.exit(2)
