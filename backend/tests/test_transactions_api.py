"""
Transaction API tests.

Verifies:
- Creating a transaction prices it from the catalog and settles purchased rows
- Unknown trader names need a contact and create the trader
- Payload validation (qty, type, status, unknown fields)
- Listing filters and ordering
- Stock and dashboard views follow the ledger
"""

import pytest

from udh.models import ActivityLog, Trader, Transaction


def _sale(**overrides):
    payload = {
        "date": "2024-01-10",
        "name": "Ravi",
        "type": "sell",
        "product": "Cement",
        "size": "50kg",
        "qty": 3,
    }
    payload.update(overrides)
    return payload


def _purchase(**overrides):
    payload = {
        "date": "2024-01-05",
        "name": "Acme Supplies",
        "type": "buy",
        "product": "Cement",
        "size": "50kg",
        "qty": 100,
    }
    payload.update(overrides)
    return payload


class TestCreateTransaction:

    def test_amount_from_catalog_price(self, client, worker_headers, catalog, traders):
        resp = client.post("/api/transactions", json=_sale(), headers=worker_headers)
        assert resp.status_code == 201
        tx = resp.json["transaction"]
        assert tx["amount"] == pytest.approx(1200.0)
        assert tx["status"] == "purchased"
        assert tx["paid_amount"] == pytest.approx(1200.0)
        assert tx["date"] == "2024-01-10"

    def test_purchase_uses_buy_side_price(self, client, worker_headers, catalog, traders):
        resp = client.post("/api/transactions", json=_purchase(qty=2), headers=worker_headers)
        assert resp.json["transaction"]["amount"] == pytest.approx(700.0)

    def test_explicit_amount_wins(self, client, worker_headers, catalog, traders):
        resp = client.post("/api/transactions", json=_sale(amount=999), headers=worker_headers)
        assert resp.json["transaction"]["amount"] == 999

    def test_unlisted_product_costs_nothing(self, client, worker_headers, traders):
        resp = client.post("/api/transactions", json=_sale(product="Sand", size="1t"), headers=worker_headers)
        assert resp.status_code == 201
        assert resp.json["transaction"]["amount"] == 0

    def test_booked_keeps_partial_payment(self, client, worker_headers, catalog, traders):
        resp = client.post(
            "/api/transactions",
            json=_sale(status="booked", paid_amount=500, promise_date="2024-02-01", payment_method="UPI"),
            headers=worker_headers,
        )
        tx = resp.json["transaction"]
        assert tx["status"] == "booked"
        assert tx["paid_amount"] == 500
        assert tx["promise_date"] == "2024-02-01"

    def test_date_defaults_to_today(self, client, worker_headers, catalog, traders):
        payload = _sale()
        del payload["date"]
        resp = client.post("/api/transactions", json=payload, headers=worker_headers)
        assert resp.status_code == 201
        assert resp.json["transaction"]["date"]

    def test_new_customer_needs_contact(self, client, worker_headers, catalog):
        resp = client.post("/api/transactions", json=_sale(name="Latha"), headers=worker_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "Contact number is required for new customers."

    def test_new_customer_is_created(self, client, db_session, worker_headers, catalog):
        resp = client.post(
            "/api/transactions",
            json=_sale(name="Latha", contact="9000000001"),
            headers=worker_headers,
        )
        assert resp.status_code == 201
        trader = db_session.query(Trader).filter_by(name="Latha").one()
        assert trader.type == "Customer"
        assert trader.contact == "9000000001"

    def test_new_dealer_is_created_for_purchases(self, client, db_session, worker_headers, catalog):
        client.post(
            "/api/transactions",
            json=_purchase(name="Nandi Cements", contact="0800000000"),
            headers=worker_headers,
        )
        assert db_session.query(Trader).filter_by(name="Nandi Cements").one().type == "Dealer"

    def test_known_trader_matches_case_insensitively(self, client, db_session, worker_headers, catalog, traders):
        resp = client.post("/api/transactions", json=_sale(name="RAVI"), headers=worker_headers)
        assert resp.status_code == 201
        assert db_session.query(Trader).count() == 2

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"qty": 0}, "Quantity must be at least 1."),
            ({"qty": -4}, "Quantity must be at least 1."),
            ({"qty": 1.5}, "qty must be an integer, not a decimal"),
            ({"qty": "abc"}, "qty must be an integer"),
            ({"type": "gift"}, "type must be buy or sell"),
            ({"status": "lost"}, "status must be purchased, booked or returned"),
            ({"amount": -1}, "amount must be >= 0"),
            ({"date": "yesterday"}, "date must be an ISO-8601 date"),
            ({"discount": 5}, "Field not allowed: discount"),
        ],
    )
    def test_invalid_payload(self, client, db_session, worker_headers, catalog, traders, overrides, message):
        resp = client.post("/api/transactions", json=_sale(**overrides), headers=worker_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == message
        assert db_session.query(Transaction).count() == 0

    def test_missing_fields(self, client, worker_headers):
        resp = client.post("/api/transactions", json={"name": "Ravi"}, headers=worker_headers)
        assert resp.status_code == 400
        assert resp.json["error"].startswith("Missing required fields")

    def test_mutation_is_logged(self, client, db_session, worker_headers, catalog, traders):
        client.post("/api/transactions", json=_sale(), headers=worker_headers)
        entry = db_session.query(ActivityLog).filter_by(action="transaction.create").one()
        assert entry.username == "worker"
        assert entry.details["product"] == "Cement"


class TestUpdateAndDelete:

    def test_update_then_settle(self, client, staff_headers, catalog, traders):
        created = client.post(
            "/api/transactions",
            json=_sale(status="booked", paid_amount=100),
            headers=staff_headers,
        ).json["transaction"]

        resp = client.put(
            f"/api/transactions/{created['id']}",
            json={"status": "purchased", "id": created["id"]},
            headers=staff_headers,
        )
        assert resp.status_code == 200
        tx = resp.json["transaction"]
        assert tx["status"] == "purchased"
        assert tx["paid_amount"] == tx["amount"]

    def test_rename_to_unknown_trader_needs_contact(self, client, db_session, staff_headers, catalog, traders):
        created = client.post("/api/transactions", json=_sale(), headers=staff_headers).json["transaction"]

        resp = client.put(
            f"/api/transactions/{created['id']}",
            json={"name": "Latha"},
            headers=staff_headers,
        )
        assert resp.status_code == 400
        assert resp.json["error"] == "Contact number is required for new customers."
        assert db_session.query(Trader).count() == 2
        assert client.get(f"/api/transactions/{created['id']}", headers=staff_headers).json["transaction"]["name"] == "Ravi"

    def test_rename_to_unknown_trader_creates_it(self, client, db_session, staff_headers, catalog, traders):
        created = client.post("/api/transactions", json=_sale(), headers=staff_headers).json["transaction"]

        resp = client.put(
            f"/api/transactions/{created['id']}",
            json={"name": "Latha", "contact": "9000000001"},
            headers=staff_headers,
        )
        assert resp.status_code == 200
        assert resp.json["transaction"]["name"] == "Latha"
        trader = db_session.query(Trader).filter_by(name="Latha").one()
        assert trader.type == "Customer"
        assert trader.contact == "9000000001"

    def test_update_unknown(self, client, staff_headers):
        resp = client.put("/api/transactions/999", json={"qty": 2}, headers=staff_headers)
        assert resp.status_code == 404

    def test_delete(self, client, owner_headers, catalog, traders):
        created = client.post("/api/transactions", json=_sale(), headers=owner_headers).json["transaction"]
        assert client.delete(f"/api/transactions/{created['id']}", headers=owner_headers).status_code == 200
        assert client.get(f"/api/transactions/{created['id']}", headers=owner_headers).status_code == 404


class TestListTransactions:

    @pytest.fixture
    def seeded(self, client, owner_headers, catalog, traders):
        for payload in [
            _purchase(),
            _sale(date="2024-01-10", qty=3),
            _sale(date="2024-01-12", qty=2, status="booked", paid_amount=0),
            _sale(date="2024-01-12", qty=1, product="Steel", size="12mm"),
        ]:
            assert client.post("/api/transactions", json=payload, headers=owner_headers).status_code == 201
        return owner_headers

    def test_newest_first(self, client, seeded):
        rows = client.get("/api/transactions", headers=seeded).json["transactions"]
        assert [r["date"] for r in rows] == ["2024-01-12", "2024-01-12", "2024-01-10", "2024-01-05"]
        # Same day: newest id first
        assert rows[0]["id"] > rows[1]["id"]

    def test_mode_filter(self, client, seeded):
        data = client.get("/api/transactions?mode=buy", headers=seeded).json
        assert data["count"] == 1
        assert data["transactions"][0]["type"] == "buy"

    def test_filters(self, client, seeded):
        by_name = client.get("/api/transactions?name=rav", headers=seeded).json
        assert by_name["count"] == 3

        by_product = client.get("/api/transactions?product=Steel", headers=seeded).json
        assert by_product["count"] == 1

        all_products = client.get("/api/transactions?product=all&status=all", headers=seeded).json
        assert all_products["count"] == 4

        by_status = client.get("/api/transactions?status=booked", headers=seeded).json
        assert by_status["count"] == 1

        by_date = client.get("/api/transactions?date=2024-01-12", headers=seeded).json
        assert by_date["count"] == 2

        by_size = client.get("/api/transactions?size=50", headers=seeded).json
        assert by_size["count"] == 3

    def test_limit(self, client, seeded):
        assert client.get("/api/transactions?limit=2", headers=seeded).json["count"] == 2

    def test_bad_mode(self, client, seeded):
        assert client.get("/api/transactions?mode=rent", headers=seeded).status_code == 400

    def test_stock_follows_ledger(self, client, seeded):
        data = client.get("/api/stock?mode=sales", headers=seeded).json
        levels = {(i["product"], i["size"]): i for i in data["items"]}

        cement = levels[("Cement", "50kg")]
        assert cement["quantity"] == 95
        assert cement["low"] is False
        assert cement["suggested_limit"] == 20

        steel = levels[("Steel", "12mm")]
        assert steel["quantity"] == -1
        assert steel["oversold"] is True
        assert steel["suggested_limit"] == 50

    def test_item_ledger(self, client, seeded):
        data = client.get("/api/stock/ledger?product=Cement&size=50kg", headers=seeded).json
        assert [r["balance"] for r in data["rows"]] == [100, 97, 95]
        assert [r["qty"] for r in data["rows"]] == [100, -3, -2]
        assert data["balance"] == 95

    def test_item_ledger_needs_key(self, client, seeded):
        assert client.get("/api/stock/ledger?product=Cement", headers=seeded).status_code == 400

    def test_dashboard(self, client, seeded):
        data = client.get("/api/dashboard?mode=sales", headers=seeded).json
        assert data["total_transactions"] == 4
        assert data["stock_value"] == pytest.approx(95 * 400.0)
        assert len(data["recent"]) == 3
        assert [r["status"] for r in data["reminders"]] == []
        assert data["amount_by_date"][0]["date"] == "2024-01-10"

    def test_dashboard_reminders(self, client, owner_headers, catalog, traders):
        client.post(
            "/api/transactions",
            json=_sale(status="booked", paid_amount=0, promise_date="2024-03-01"),
            headers=owner_headers,
        )
        client.post(
            "/api/transactions",
            json=_sale(status="booked", paid_amount=0, promise_date="2024-02-01"),
            headers=owner_headers,
        )
        reminders = client.get("/api/dashboard", headers=owner_headers).json["reminders"]
        assert [r["promise_date"] for r in reminders] == ["2024-02-01", "2024-03-01"]
