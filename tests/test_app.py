"""Tests for the HTTP surface."""

import base64

from planning_relay.app import create_app
from planning_relay.exceptions import ConnectivityError
from planning_relay.transports.mock import MockTransport


class TestInfoRoutes:
    """Tests for the liveness and diagnostic routes."""

    def test_index(self, client):
        """Test the status route."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "Server is running"
        assert data["smtp"] == {
            "host": "smtp.example.com",
            "port": 587,
            "secure": False,
            "user": "planning@example.com",
        }

    def test_env_reports_presence_only(self, client):
        """Test that the env route reports whether a password is set, not its value."""
        response = client.get("/env")

        assert response.status_code == 200
        data = response.get_json()
        assert data["smtp"]["passwordSet"] is True
        assert data["smtp"]["rejectUnauthorized"] is False
        assert "s3cret" not in response.get_data(as_text=True)

    def test_cors_headers(self, client):
        """Test the CORS header on responses."""
        response = client.get("/")
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_preflight(self, client):
        """Test answering a CORS preflight request."""
        response = client.options("/send-planning")

        assert response.status_code == 200
        assert "POST" in response.headers["Access-Control-Allow-Methods"]


class TestTestEmail:
    """Tests for GET /test-email."""

    def test_success(self, client, transport):
        """Test sending the diagnostic email."""
        response = client.get("/test-email")

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert data["messageId"] == "<mock-1@planning-relay>"
        assert transport.sent[0].recipient == "planning@example.com"

    def test_verify_failure(self, settings):
        """Test the diagnostic route when the SMTP server is unreachable."""
        transport = MockTransport(
            verify_error=ConnectivityError("Invalid login", code="EAUTH", command="AUTH PLAIN")
        )
        client = create_app(settings=settings, transport=transport).test_client()

        response = client.get("/test-email")

        assert response.status_code == 500
        data = response.get_json()
        assert data["success"] is False
        assert data["error"] == {"message": "Invalid login", "code": "EAUTH", "command": "AUTH PLAIN"}
        assert data["config"]["host"] == "smtp.example.com"

    def test_send_failure(self, settings):
        """Test the diagnostic route when the send is rejected."""
        transport = MockTransport(fail_for=["planning@example.com"])
        client = create_app(settings=settings, transport=transport).test_client()

        response = client.get("/test-email")

        assert response.status_code == 500
        assert response.get_json()["error"]["command"] == "RCPT TO"


class TestSendPlanning:
    """Tests for POST /send-planning."""

    def test_weekly(self, client, transport, weekly_payload):
        """Test sending a weekly planning."""
        response = client.post("/send-planning", json=weekly_payload)

        assert response.status_code == 200
        results = response.get_json()
        assert [r["employee"]["name"] for r in results] == ["Alice", "Charlie"]
        assert all(r["success"] for r in results)
        assert transport.sent[0].subject == "Planning du 03/06/2024 au 09/06/2024"

    def test_blank_email_excluded_base64_document(self, client, transport, pdf_bytes):
        """Test that a blank email is skipped and a base64 document is accepted."""
        payload = {
            "document": base64.b64encode(pdf_bytes).decode("ascii"),
            "recipients": [
                {"name": "Alice", "email": "a@x.com"},
                {"name": "Bob", "email": ""},
            ],
            "periodStart": "2024-06-03",
            "mode": "Weekly",
        }

        results = client.post("/send-planning", json=payload).get_json()

        assert len(results) == 1
        assert results[0]["employee"]["email"] == "a@x.com"
        assert transport.attempts == ["a@x.com"]

    def test_monthly_custom(self, client, transport, monthly_payload):
        """Test sending a monthly planning with custom content."""
        response = client.post("/send-planning", json=monthly_payload)

        assert response.status_code == 200
        message = transport.sent[0]
        assert message.text_body == "Bonjour Alice, voici juin"
        assert message.attachments[0].filename == "planning_mensuel_juin_2024.pdf"

    def test_partial_failure(self, settings, weekly_payload):
        """Test that one failed recipient does not fail the request."""
        transport = MockTransport(fail_for=["alice@example.com"])
        client = create_app(settings=settings, transport=transport).test_client()

        response = client.post("/send-planning", json=weekly_payload)

        assert response.status_code == 200
        results = response.get_json()
        assert results[0]["success"] is False
        assert "rejected" in results[0]["error"]
        assert results[1]["success"] is True

    def test_empty_recipient_list(self, client, weekly_payload):
        """Test sending to an empty recipient list."""
        weekly_payload["employees"] = []

        response = client.post("/send-planning", json=weekly_payload)

        assert response.status_code == 200
        assert response.get_json() == []

    def test_missing_fields(self, client, transport, weekly_payload):
        """Test a request with missing fields."""
        del weekly_payload["pdfBuffer"]

        response = client.post("/send-planning", json=weekly_payload)

        assert response.status_code == 500
        assert "pdfBuffer" in response.get_json()["error"]
        assert transport.attempts == []

    def test_not_json(self, client, transport):
        """Test a request whose body is not JSON."""
        response = client.post("/send-planning", data="hello", content_type="text/plain")

        assert response.status_code == 500
        assert "error" in response.get_json()

    def test_body_too_large(self, settings, transport, weekly_payload):
        """Test rejecting an oversized request body."""
        settings.server.max_content_length = 64
        client = create_app(settings=settings, transport=transport).test_client()

        response = client.post("/send-planning", json=weekly_payload)

        assert response.status_code == 413
        assert "error" in response.get_json()
        assert transport.attempts == []
