"""Contract tests for /api/forms and /api/webhooks."""

from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

COLLECTION_FORM = {
    "Email Address": "usher@church.ph",
    "Date": "01/08/2023",
    "General Tithes & Offering": "9755",
}

EXPENSE_FORM = {
    "Email Address": "treasurer@church.ph",
    "Date": "01/31/2023",
    "1. Operational Fund": "Honorarium",
    "1. Amount": "3000",
}


class TestFormRelay:
    """Test relayed Google Form submissions."""

    def test_secret_required(self, client):
        """A relayed form without the secret returns 401."""
        response = client.post("/api/forms/collection", json=COLLECTION_FORM)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_webhook_secret"

    def test_wrong_secret(self, client):
        """A wrong secret returns 401."""
        response = client.post(
            "/api/forms/collection", json=COLLECTION_FORM, headers={"X-Webhook-Secret": "nope"}
        )
        assert response.status_code == 401

    def test_collection_form(self, client, webhook_headers):
        """Test a relayed Google Form collection."""
        response = client.post("/api/forms/collection", json=COLLECTION_FORM, headers=webhook_headers)

        assert response.status_code == 201
        collection = response.json()["collection"]
        assert collection["submitted_via"] == "google_form"
        assert collection["control_number"].startswith("FORM-")
        assert Decimal(collection["shared_fund_share"]) == Decimal("975.50")

    def test_collection_form_validation(self, client, webhook_headers):
        """A relayed form without amounts returns 400."""
        response = client.post(
            "/api/forms/collection", json={"Email Address": "x@y.ph"}, headers=webhook_headers
        )
        assert response.status_code == 400

    def test_expense_form_double_submit(self, client, webhook_headers):
        """A double submit returns the first expense with 200."""
        first = client.post("/api/forms/expense", json=EXPENSE_FORM, headers=webhook_headers)
        second = client.post("/api/forms/expense", json=EXPENSE_FORM, headers=webhook_headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["duplicate"] is True
        assert second.json()["expense"]["id"] == first.json()["expense"]["id"]


class TestWebhooks:
    """Test webhook endpoints for automation tools."""

    def seed(self, client):
        client.post(
            "/api/collections",
            json={"date": "2023-01-08", "particular": "Sunday", "general_tithes_offering": 9755},
        )
        client.post(
            "/api/expenses",
            json={"date": "2023-01-31", "category": "Operational Fund", "honorarium": 3000},
        )

    def test_recent_submissions(self, client, webhook_headers):
        """Both record kinds show up in recent submissions."""
        self.seed(client)
        data = client.get("/api/webhooks/recent-submissions", headers=webhook_headers).json()

        assert data["count"] == 2

    def test_financial_summary(self, client, webhook_headers):
        """Net balance is collections minus expenses in the range."""
        self.seed(client)
        data = client.get(
            "/api/webhooks/financial-summary",
            params={"start_date": "2023-01-01", "end_date": "2023-01-31"},
            headers=webhook_headers,
        ).json()

        assert Decimal(str(data["net_balance"])) == Decimal("6755")
        assert data["collections"]["count"] == 1

    def test_budget_alerts_without_plan(self, client, webhook_headers):
        """No plan means no alerts."""
        data = client.get(
            "/api/webhooks/budget-alerts", params={"year": 2023}, headers=webhook_headers
        ).json()
        assert data["alerts"] == []

    def test_rows_for_sheets(self, client, webhook_headers):
        """Sheet rows start with the header row."""
        self.seed(client)

        collections = client.get(
            "/api/webhooks/collections-for-sheets", headers=webhook_headers
        ).json()["values"]
        expenses = client.get(
            "/api/webhooks/expenses-for-sheets", headers=webhook_headers
        ).json()["values"]

        assert collections[0][0] == "Date"
        assert collections[1][0] == "01/08/2023"
        assert len(expenses) == 2

    @pytest.mark.parametrize(
        "path",
        [
            "/api/webhooks/recent-submissions",
            "/api/webhooks/financial-summary",
            "/api/webhooks/budget-alerts",
            "/api/webhooks/collections-for-sheets",
            "/api/webhooks/expenses-for-sheets",
        ],
    )
    def test_reads_require_secret(self, client, path):
        """Financial data is never served without the shared secret."""
        self.seed(client)

        assert client.get(path).status_code == 401
        response = client.get(path, headers={"X-Webhook-Secret": "nope"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_webhook_secret"

    def test_export_requires_secret(self, client):
        """Export is rejected without the shared secret."""
        assert client.post("/api/webhooks/export-to-sheets", json={}).status_code == 401

    def test_export_to_sheets(self, client, webhook_headers, monkeypatch):
        """Test exporting collections and the summary with a mocked client."""
        from church_ledger.config import settings

        self.seed(client)
        monkeypatch.setattr(settings, "google_spreadsheet_id", "sheet-123")
        sheets_client = Mock()

        with patch("church_ledger.services.google_sheets.GoogleSheetsClient", return_value=sheets_client):
            response = client.post(
                "/api/webhooks/export-to-sheets",
                json={"kinds": ["collection"], "start_date": "2023-01-01", "end_date": "2023-01-31"},
                headers=webhook_headers,
            )

        assert response.status_code == 200
        sheets = response.json()["sheets"]
        assert sheets[0] == {"sheet": "Collections", "records": 1}
        assert sheets[1]["sheet"] == "Summary"
        written = [c.args[1] for c in sheets_client.write_sheet.call_args_list]
        assert written == ["Collections", "Summary"]

    def test_export_without_spreadsheet(self, client, webhook_headers, monkeypatch):
        """Export without a configured spreadsheet returns 502."""
        from church_ledger.config import settings

        monkeypatch.setattr(settings, "google_spreadsheet_id", None)
        response = client.post("/api/webhooks/export-to-sheets", json={}, headers=webhook_headers)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "sheets_export_failed"
