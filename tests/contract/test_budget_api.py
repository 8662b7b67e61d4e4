"""Contract tests for /api/budget and /api/custom-fields."""

from decimal import Decimal

PLAN = {
    "year": 2023,
    "target_offering": 500000,
    "categories": [
        {"category": "Operational Fund", "subcategory": "Honorarium", "budget_amount": 36000},
        {"category": "Shared Fund", "budget_amount": 50000},
    ],
}


class TestBudgetEndpoints:
    """Test budget plan, comparison and availability endpoints."""

    def test_save_and_get_plan(self, client):
        """Test POST /api/budget/plan then reading the plan back."""
        response = client.post("/api/budget/plan", json=PLAN, headers={"X-User-Email": "admin@church.ph"})

        assert response.status_code == 200
        assert response.json()["created_by"] == "admin@church.ph"

        plan = client.get("/api/budget/plan/2023").json()
        assert Decimal(plan["target_offering"]) == Decimal("500000.00")
        assert [c["category"] for c in plan["categories"]] == ["Operational Fund", "Shared Fund"]

    def test_missing_plan(self, client):
        """A year without a plan returns 404."""
        response = client.get("/api/budget/plan/1999")
        assert response.status_code == 404

    def test_plan_validation(self, client):
        """Test the 400 envelope for an invalid plan."""
        response = client.post("/api/budget/plan", json={"categories": []})

        assert response.status_code == 400
        fields = {i["field"] for i in response.json()["error"]["issues"]}
        assert fields == {"year", "target_offering"}

    def test_comparison(self, client):
        """Test budget vs actual lines over HTTP."""
        client.post("/api/budget/plan", json=PLAN)
        client.post(
            "/api/expenses",
            json={
                "date": "2023-01-31",
                "category": "Operational Fund",
                "subcategory": "Honorarium",
                "honorarium": 3000,
            },
        )
        client.post("/api/expenses", json={"date": "2023-02-01", "category": "Repairs", "total_amount": 700})

        lines = client.get("/api/budget/comparison/2023").json()
        by_category = {(x["category"], x["subcategory"]): x for x in lines}

        honorarium = by_category[("Operational Fund", "Honorarium")]
        assert Decimal(honorarium["actual_amount"]) == Decimal("3000.00")
        assert Decimal(honorarium["variance"]) == Decimal("33000.00")
        assert by_category[("Repairs", None)]["in_plan"] is False

        february = client.get("/api/budget/comparison/2023", params={"month": 2}).json()
        assert all(Decimal(x["actual_amount"]) == 0 for x in february if x["category"] != "Repairs")

    def test_available(self, client):
        """Test the available budget endpoint."""
        client.post("/api/budget/plan", json=PLAN)
        client.post("/api/expenses", json={"date": "2023-03-01", "category": "Shared Fund", "total_amount": 1000})

        result = client.get("/api/budget/available/2023/Shared Fund").json()
        assert Decimal(result["available_amount"]) == Decimal("49000.00")


class TestCustomFieldEndpoints:
    """Test custom field definition and value endpoints."""

    def create(self, client, **overrides):
        payload = {
            "table_name": "collections",
            "field_name": "mission_offering",
            "field_label": "Mission Offering",
            "field_type": "decimal",
        }
        payload.update(overrides)
        return client.post("/api/custom-fields", json=payload)

    def test_create_and_list(self, client):
        """Test creating and listing a custom field."""
        response = self.create(client)
        assert response.status_code == 201
        assert response.json()["field_type"] == "decimal"

        fields = client.get("/api/custom-fields/collections").json()
        assert [f["field_name"] for f in fields] == ["mission_offering"]

    def test_duplicate(self, client):
        """A duplicate field name returns 409."""
        self.create(client)
        response = self.create(client)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "duplicate_field"

    def test_invalid_table(self, client):
        """An unknown table name returns 400."""
        assert client.get("/api/custom-fields/pledges").status_code == 400

    def test_update_and_deactivate(self, client):
        """Test updating a field and then soft-deleting it."""
        field_id = self.create(client).json()["id"]

        updated = client.put(f"/api/custom-fields/{field_id}", json={"field_label": "Missions"})
        assert updated.json()["field_label"] == "Missions"

        assert client.delete(f"/api/custom-fields/{field_id}").status_code == 200
        assert client.get("/api/custom-fields/collections").json() == []

    def test_values(self, client):
        """Test saving and reading a record's custom values."""
        self.create(client)
        collection = client.post(
            "/api/collections",
            json={"date": "2023-01-08", "particular": "Sunday", "total_amount": 100},
        ).json()

        saved = client.post(
            f"/api/custom-fields/collections/{collection['id']}/values",
            json={"values": {"mission_offering": "250"}},
        )
        assert saved.json()["saved"] == 1

        values = client.get(f"/api/custom-fields/collections/{collection['id']}/values").json()
        assert Decimal(str(values["mission_offering"])) == Decimal("250")

    def test_record_with_custom_values(self, client):
        """Test custom values sent along with a new collection."""
        self.create(client)
        collection = client.post(
            "/api/collections",
            json={
                "date": "2023-01-08",
                "particular": "Sunday",
                "total_amount": 100,
                "custom_fields": {"mission_offering": 75},
            },
        ).json()

        values = client.get(f"/api/custom-fields/collections/{collection['id']}/values").json()
        assert Decimal(str(values["mission_offering"])) == Decimal("75")
