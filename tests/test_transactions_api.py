"""API tests for transactions: ownership, filters and type consistency."""
import pytest

from conftest import system_category_id

MISSING_ID = "00000000-0000-4000-8000-000000000000"


def create_transaction(client, account, category_id, **overrides):
    payload = {"category_id": category_id, "amount": 42.5, "type": "expense", "date": "2024-03-10"}
    payload.update(overrides)
    return client.post("/api/transactions", json=payload, headers=account.headers)


@pytest.fixture
def transaction(client, alice, expense_category):
    response = create_transaction(client, alice, expense_category["id"], description="Rent March")
    assert response.status_code == 201
    return response.json()


class TestCreateTransaction:
    def test_create(self, client, alice, expense_category):
        response = create_transaction(client, alice, expense_category["id"])
        assert response.status_code == 201
        body = response.json()
        assert body["user_id"] == alice.id
        assert body["amount"] == 42.5
        assert body["date"] == "2024-03-10"
        assert body["description"] is None

    def test_against_system_category(self, client, alice):
        food = system_category_id(client, alice, "Food")
        assert create_transaction(client, alice, food).status_code == 201

    def test_type_mismatch(self, client, alice, expense_category):
        response = create_transaction(client, alice, expense_category["id"], type="income")
        assert response.status_code == 400
        assert response.json() == {
            "error": "Transaction type mismatch",
            "message": "Transaction type must match category type. Category is of type "
            "'expense', but transaction type is 'income'",
        }

    def test_unknown_category(self, client, alice):
        response = create_transaction(client, alice, MISSING_ID)
        assert response.status_code == 400
        assert response.json() == {
            "error": "Invalid category_id",
            "message": "The specified category does not exist",
        }

    @pytest.mark.parametrize("amount", [0, 0.001, -3, "12", True, 10000000000])
    def test_bad_amount(self, client, alice, expense_category, amount):
        response = create_transaction(client, alice, expense_category["id"], amount=amount)
        assert response.status_code == 400
        assert response.json()["error"].startswith("Amount must be a positive number")

    def test_amount_rounded_to_cents(self, client, alice, expense_category):
        response = create_transaction(client, alice, expense_category["id"], amount=10.005)
        assert response.json()["amount"] == 10.01

    def test_impossible_date(self, client, alice, expense_category):
        response = create_transaction(client, alice, expense_category["id"], date="2024-02-30")
        assert response.status_code == 400


class TestReadTransactions:
    def test_owner_and_privileged_can_read(self, client, alice, manager, transaction):
        for account in (alice, manager):
            response = client.get(f"/api/transactions/{transaction['id']}", headers=account.headers)
            assert response.status_code == 200

    def test_other_user_forbidden(self, client, bob, transaction):
        response = client.get(f"/api/transactions/{transaction['id']}", headers=bob.headers)
        assert response.status_code == 403
        assert response.json()["message"] == "You can only view your own transactions"

    def test_list_defaults_to_own_records(self, client, alice, bob, transaction):
        assert len(client.get("/api/transactions", headers=alice.headers).json()) == 1
        assert client.get("/api/transactions", headers=bob.headers).json() == []

    def test_user_filter_for_other_user_forbidden(self, client, alice, bob, transaction):
        response = client.get(f"/api/transactions?user_id={alice.id}", headers=bob.headers)
        assert response.status_code == 403

    def test_admin_lists_everyone(self, client, admin, transaction):
        response = client.get("/api/transactions", headers=admin.headers)
        assert [t["id"] for t in response.json()] == [transaction["id"]]

    def test_filters(self, client, alice, expense_category, income_category):
        create_transaction(client, alice, expense_category["id"], date="2024-01-15")
        create_transaction(client, alice, expense_category["id"], date="2024-02-15")
        create_transaction(client, alice, income_category["id"], type="income", date="2024-02-20")

        by_type = client.get("/api/transactions?type=income", headers=alice.headers).json()
        assert len(by_type) == 1

        by_range = client.get(
            "/api/transactions?start_date=2024-02-01&end_date=2024-02-28",
            headers=alice.headers,
        ).json()
        assert [t["date"] for t in by_range] == ["2024-02-20", "2024-02-15"]

        by_category = client.get(
            f"/api/transactions?category_id={expense_category['id']}", headers=alice.headers
        ).json()
        assert len(by_category) == 2

    def test_bad_filter(self, client, alice):
        response = client.get("/api/transactions?start_date=yesterday", headers=alice.headers)
        assert response.status_code == 400

    def test_list_by_user_path(self, client, alice, bob, manager, transaction):
        assert client.get(f"/api/transactions/user/{alice.id}", headers=bob.headers).status_code == 403
        response = client.get(f"/api/transactions/user/{alice.id}", headers=manager.headers)
        assert len(response.json()) == 1


class TestUpdateTransaction:
    def test_update_amount(self, client, alice, transaction):
        response = client.put(
            f"/api/transactions/{transaction['id']}", json={"amount": 99}, headers=alice.headers
        )
        assert response.status_code == 200
        assert response.json()["amount"] == 99.0
        assert response.json()["description"] == "Rent March"

    def test_other_user_forbidden(self, client, bob, transaction):
        response = client.put(
            f"/api/transactions/{transaction['id']}", json={"amount": 1}, headers=bob.headers
        )
        assert response.status_code == 403

    def test_changing_type_alone_rechecks_category(self, client, alice, transaction):
        response = client.put(
            f"/api/transactions/{transaction['id']}", json={"type": "income"}, headers=alice.headers
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Transaction type mismatch"

    def test_changing_category_alone_rechecks_type(self, client, alice, transaction, income_category):
        response = client.put(
            f"/api/transactions/{transaction['id']}",
            json={"category_id": income_category["id"]},
            headers=alice.headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Transaction type mismatch"

    def test_changing_both_together(self, client, alice, transaction, income_category):
        response = client.put(
            f"/api/transactions/{transaction['id']}",
            json={"category_id": income_category["id"], "type": "income"},
            headers=alice.headers,
        )
        assert response.status_code == 200
        assert response.json()["type"] == "income"

    def test_owner_cannot_be_changed(self, client, alice, bob, transaction):
        response = client.put(
            f"/api/transactions/{transaction['id']}", json={"user_id": bob.id}, headers=alice.headers
        )
        assert response.status_code == 200
        assert response.json()["user_id"] == alice.id

    def test_unknown_id(self, client, alice):
        response = client.put(f"/api/transactions/{MISSING_ID}", json={"amount": 1}, headers=alice.headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Transaction not found"}


class TestDeleteTransaction:
    def test_delete(self, client, alice, transaction):
        url = f"/api/transactions/{transaction['id']}"
        assert client.delete(url, headers=alice.headers).status_code == 204
        assert client.delete(url, headers=alice.headers).status_code == 404

    def test_other_user_forbidden(self, client, bob, transaction):
        response = client.delete(f"/api/transactions/{transaction['id']}", headers=bob.headers)
        assert response.status_code == 403

    def test_invalid_id(self, client, alice):
        response = client.delete("/api/transactions/1", headers=alice.headers)
        assert response.json() == {"error": "Invalid transaction ID format"}
