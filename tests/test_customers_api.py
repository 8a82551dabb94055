"""
Tests for customer records and the price list.
"""
from laundrydesk.model import Service


class TestCustomers:
    def test_create_and_fetch(self, client, login):
        headers = login("manager")
        r = client.post("/customers", json={"name": "Baraka Mushi", "phone": "+255711111111"}, headers=headers)
        assert r.status_code == 201
        cid = r.get_json()["data"]["id"]
        r = client.get(f"/customers/{cid}", headers=headers)
        assert r.get_json()["data"]["name"] == "Baraka Mushi"
        assert r.get_json()["data"]["loyalty"] is None

    def test_duplicate_phone(self, client, login, customer):
        r = client.post("/customers", json={"name": "Other", "phone": customer.phone}, headers=login("manager"))
        assert r.status_code == 409

    def test_name_and_phone_required(self, client, login):
        assert client.post("/customers", json={"name": "X"}, headers=login("manager")).status_code == 422

    def test_search(self, client, login, customer):
        r = client.get("/customers?q=amina", headers=login("cashier"))
        assert [c["id"] for c in r.get_json()["data"]["items"]] == [customer.id]
        r = client.get("/customers?q=zzz", headers=login("cashier"))
        assert r.get_json()["data"]["items"] == []

    def test_cashier_cannot_create(self, client, login):
        r = client.post("/customers", json={"name": "A", "phone": "1"}, headers=login("cashier"))
        assert r.status_code == 403


class TestPriceList:
    def test_lists_active_services(self, client, login, services):
        services["ironing"].is_active = False
        r = client.get("/price-list", headers=login("cashier"))
        names = [s["name"] for s in r.get_json()["data"]["items"]]
        assert names == ["Dry Clean", "Wash & Fold"]

    def test_admin_adds_service(self, client, login):
        r = client.post("/price-list", json={"name": "Duvet", "base_price": 8000}, headers=login("admin"))
        assert r.status_code == 201
        assert Service.query.filter_by(name="Duvet").one().base_price == 8000

    def test_negative_price_rejected(self, client, login):
        r = client.post("/price-list", json={"name": "Duvet", "base_price": -1}, headers=login("admin"))
        assert r.status_code == 422

    def test_manager_cannot_edit_prices(self, client, login):
        r = client.post("/price-list", json={"name": "Duvet", "base_price": 8000}, headers=login("manager"))
        assert r.status_code == 403
