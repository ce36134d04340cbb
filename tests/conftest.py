"""Shared test fixtures."""

import pytest

from planning_relay.app import create_app
from planning_relay.config import Settings, SMTPConfig, ServerConfig
from planning_relay.transports.mock import MockTransport

ENV_VARS = [
    "SMTP_HOST", "SMTP_PORT", "SMTP_SECURE", "SMTP_USER", "SMTP_PASS",
    "SMTP_FROM", "SMTP_TIMEOUT", "NODE_ENV", "APP_ENV", "PORT", "HOST",
    "MAX_CONTENT_LENGTH", "CORS_ORIGIN", "LOG_LEVEL", "LOG_FILE",
]

# Smallest well-formed PDF header is enough for an opaque attachment
PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the settings under test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    """Settings for a development SMTP account."""
    return Settings(
        environment="development",
        smtp=SMTPConfig(
            host="smtp.example.com",
            port=587,
            user="planning@example.com",
            password="s3cret",
        ),
        server=ServerConfig(port=3000, max_content_length=1024 * 1024),
    )


@pytest.fixture
def transport():
    """Mock transport sending as the planning account."""
    return MockTransport(sender="planning@example.com")


@pytest.fixture
def app(settings, transport):
    return create_app(settings=settings, transport=transport)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def sample_employees():
    """Employees as sent by the planning front-end."""
    return [
        {"name": "Alice", "email": "alice@example.com"},
        {"name": "Bob", "email": ""},
        {"name": "Charlie", "email": "charlie@example.com"},
        {"name": "Dana"},
    ]


@pytest.fixture
def weekly_payload(pdf_bytes, sample_employees):
    """Weekly request in the original wire format (byte array)."""
    return {
        "pdfBuffer": list(pdf_bytes),
        "employees": sample_employees,
        "weekStartDate": "2024-06-03",
    }


@pytest.fixture
def monthly_payload(pdf_bytes):
    """Monthly request with custom content."""
    return {
        "pdfBuffer": list(pdf_bytes),
        "employees": [{"name": "Alice", "email": "alice@example.com"}],
        "weekStartDate": "2024-06-01",
        "mode": "monthly",
        "customEmail": {
            "subject": "Juin",
            "body": "Bonjour {name}, voici juin",
            "periodLabel": "Juin_2024",
        },
    }
