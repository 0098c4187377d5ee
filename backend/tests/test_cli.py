"""
CLI tests for the `flask data` command group.
"""

from conftest import read_document


class TestDataCommands:
    def test_init_is_idempotent_without_force(self, app, client):
        client.post("/api/products", json={"product_name": "Gin"})
        result = app.test_cli_runner().invoke(args=["data", "init"])

        assert result.exit_code == 0
        assert "already initialized" in result.output
        assert len(read_document(app)["products"]) == 1

    def test_init_force_resets(self, app, client):
        client.post("/api/products", json={"product_name": "Gin"})
        result = app.test_cli_runner().invoke(args=["data", "init", "--force"], input="y\n")

        assert result.exit_code == 0
        assert read_document(app)["products"] == []

    def test_seed_creates_default_users_once(self, app):
        runner = app.test_cli_runner()
        first = runner.invoke(args=["data", "seed"])
        second = runner.invoke(args=["data", "seed"])

        users = read_document(app)["users"]
        assert first.exit_code == 0
        assert "3 user(s) created" in first.output
        assert "0 user(s) created" in second.output
        assert sorted(u["id"] for u in users) == ["admin-user-id", "sales-rep-1", "sales-rep-2"]
        assert {u["role_id"] for u in users} == {"admin-role-id", "sales-rep-role-id"}

    def test_stats(self, app, client):
        client.post("/api/customers", json={"name": "Shop"})
        result = app.test_cli_runner().invoke(args=["data", "stats"])

        assert result.exit_code == 0
        customers_line = next(line for line in result.output.splitlines() if line.startswith("customers"))
        assert customers_line.split()[-1] == "1"

    def test_audit_clean(self, app, client):
        product = client.post("/api/products", json={"product_name": "Gin", "stock_quantity": 5}).get_json()
        client.post("/api/orders", json={"items": [{"product_id": product["id"], "quantity": 2, "unit_price": 10}]})

        result = app.test_cli_runner().invoke(args=["data", "audit"])
        assert result.exit_code == 0
        assert "PASS" in result.output

    def test_audit_findings_exit_1(self, app, store):
        with store.transaction() as document:
            document["products"].append({"id": "p1", "stock_quantity": -3})
            document["products"].append({"id": "p1", "stock_quantity": 1})
            document["orders"].append({
                "id": "o1",
                "total_amount": 99,
                "items": [{"product_id": "p1", "quantity": 1, "unit_price": 10}],
            })

        result = app.test_cli_runner().invoke(args=["data", "audit"])

        assert result.exit_code == 1
        assert "duplicate id p1" in result.output
        assert "negative stock" in result.output
        assert "o1 total_amount 99" in result.output

    def test_permissions_lists_every_category(self, app):
        result = app.test_cli_runner().invoke(args=["data", "permissions"])

        assert result.exit_code == 0
        assert "ORDERS" in result.output
        assert "orders:approve" in result.output
        assert "audit:read" in result.output

    def test_permissions_for_sales_rep(self, app):
        result = app.test_cli_runner().invoke(args=["data", "permissions", "--role", "sales-rep-role-id"])

        assert result.exit_code == 0
        assert "orders:write" in result.output
        assert "orders:approve" not in result.output
        assert "USERS" not in result.output

    def test_permissions_unknown_role(self, app):
        result = app.test_cli_runner().invoke(args=["data", "permissions", "--role", "guest"])
        assert result.exit_code == 2
