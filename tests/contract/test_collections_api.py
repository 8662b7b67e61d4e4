"""Contract tests for /api/collections and /api/expenses."""

from decimal import Decimal


class TestCollectionsEndpoints:
    """Test /api/collections."""

    def test_create_collection(self, client):
        """Test POST /api/collections with allocation in the response."""
        response = client.post(
            "/api/collections",
            json={"date": "2023-01-08", "particular": "Sunday worship", "general_tithes_offering": 9755},
            headers={"X-User-Email": "treasurer@church.ph"},
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["total_amount"]) == Decimal("9755.00")
        assert Decimal(data["shared_fund_share"]) == Decimal("975.50")
        assert Decimal(data["pastoral_team_share"]) == Decimal("975.50")
        assert Decimal(data["operational_fund_share"]) == Decimal("7804.00")
        assert data["created_by"] == "treasurer@church.ph"
        assert data["submitted_via"] == "web"

    def test_default_actor(self, client):
        """Without X-User-Email the record is created by "system"."""
        response = client.post(
            "/api/collections",
            json={"date": "2023-01-08", "particular": "Sunday", "total_amount": "₱1,000"},
        )
        assert response.status_code == 201
        assert response.json()["created_by"] == "system"

    def test_validation_error_envelope(self, client):
        """Test the 400 validation error envelope."""
        response = client.post("/api/collections", json={"particular": ""})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_failed"
        assert {issue["field"] for issue in error["issues"]} == {"date", "particular", "total_amount"}
        assert {issue["code"] for issue in error["issues"]} == {"missing_required_field", "invalid_amount"}

    def test_duplicate_control_number(self, client):
        """A reused control number is rejected."""
        payload = {"date": "2023-01-08", "particular": "Sunday", "total_amount": 100, "control_number": "CN-1"}
        assert client.post("/api/collections", json=payload).status_code == 201

        response = client.post("/api/collections", json=payload)

        assert response.status_code == 400
        assert response.json()["error"]["issues"][0]["code"] == "duplicate_control_number"

    def test_get_update_delete(self, client):
        """Test reading, updating and deleting a collection by ID."""
        created = client.post(
            "/api/collections",
            json={"date": "2023-01-08", "particular": "Sunday", "general_tithes_offering": 1000},
        ).json()

        fetched = client.get(f"/api/collections/{created['id']}")
        assert fetched.status_code == 200

        updated = client.put(
            f"/api/collections/{created['id']}",
            json={"date": "2023-01-08", "particular": "Sunday", "general_tithes_offering": 2000},
        )
        assert Decimal(updated.json()["operational_fund_share"]) == Decimal("1600.00")

        assert client.delete(f"/api/collections/{created['id']}").status_code == 200
        missing = client.get(f"/api/collections/{created['id']}")
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "not_found"

    def test_list_and_summaries(self, client):
        """Test listing by period and the summary endpoints."""
        for day, tithes in (("2023-01-08", 9755), ("2023-02-05", 1000)):
            client.post(
                "/api/collections",
                json={"date": day, "particular": "Sunday", "general_tithes_offering": tithes},
            )

        january = client.get("/api/collections", params={"year": 2023, "month": 1}).json()
        assert [c["date"] for c in january] == ["2023-01-08"]

        summary = client.get("/api/collections/fund-allocation/summary", params={"year": 2023}).json()
        assert Decimal(summary["total_tithes"]) == Decimal("10755.00")
        assert Decimal(summary["total_operational"]) == Decimal("8604.00")

        detailed = client.get("/api/collections/summary/detailed").json()
        assert detailed["total_records"] == 2

    def test_invalid_month(self, client):
        """Test that month 13 returns invalid_query."""
        response = client.get("/api/collections", params={"year": 2023, "month": 13})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_query"


class TestExpensesEndpoints:
    """Test /api/expenses."""

    def test_create_expense(self, client):
        """Test POST /api/expenses."""
        response = client.post(
            "/api/expenses",
            json={"date": "2023-01-31", "category": "Operational Fund", "honorarium": 3000},
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["total_amount"]) == Decimal("3000.00")
        assert data["particular"] == "Expense"
        assert data["fund_source"] == "operational"

    def test_missing_category(self, client):
        """An expense without category returns 400."""
        response = client.post("/api/expenses", json={"date": "2023-01-31", "total_amount": 50})

        assert response.status_code == 400
        assert [i["field"] for i in response.json()["error"]["issues"]] == ["category"]

    def test_list_by_year(self, client):
        """Test listing expenses for one year."""
        client.post("/api/expenses", json={"date": "2023-01-31", "category": "Ops", "supplies": 10})
        client.post("/api/expenses", json={"date": "2022-12-31", "category": "Ops", "supplies": 10})

        assert len(client.get("/api/expenses", params={"year": 2023}).json()) == 1
        assert len(client.get("/api/expenses").json()) == 2

    def test_unknown_expense(self, client):
        """Update and delete of a missing expense return 404."""
        assert client.put("/api/expenses/42", json={}).status_code == 404
        assert client.delete("/api/expenses/42").status_code == 404


class TestHealth:
    """Test the health endpoint."""

    def test_health(self, client):
        """Test the health check."""
        assert client.get("/health").json()["status"] == "ok"
