"""API tests for categories, including system category immutability."""
from conftest import create_category, system_category_id

MISSING_ID = "00000000-0000-4000-8000-000000000000"


class TestCreateCategory:
    def test_owner_is_caller_and_color_defaults(self, client, alice):
        category = create_category(client, alice, "Rent", "expense")
        assert category["user_id"] == alice.id
        assert category["color"] == "#6B7280"
        assert category["is_system"] is False

    def test_duplicate_name_and_type(self, client, alice):
        create_category(client, alice, "Rent", "expense")
        response = client.post(
            "/api/categories", json={"name": "Rent", "type": "expense"}, headers=alice.headers
        )
        assert response.status_code == 409
        assert response.json() == {
            "error": "Unique constraint violation",
            "message": "A category with this name and type already exists for this user",
        }

    def test_same_name_other_type_or_user_is_fine(self, client, alice, bob):
        create_category(client, alice, "Rent", "expense")
        create_category(client, alice, "Rent", "income")
        create_category(client, bob, "Rent", "expense")

    def test_invalid_type(self, client, alice):
        response = client.post(
            "/api/categories", json={"name": "Rent", "type": "other"}, headers=alice.headers
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Category type must be 'income' or 'expense'"}

    def test_requires_token(self, client):
        response = client.post("/api/categories", json={"name": "Rent", "type": "expense"})
        assert response.status_code == 401


class TestListCategories:
    def test_system_categories_first(self, client, alice, bob):
        create_category(client, alice, "Aardvark care", "expense")
        create_category(client, bob, "Bob only", "expense")
        categories = client.get("/api/categories", headers=alice.headers).json()
        names = [c["name"] for c in categories]
        assert "Bob only" not in names
        assert names[-1] == "Aardvark care"
        system = [c for c in categories if c["is_system"]]
        assert len(system) == 14
        assert all(c["user_id"] is None for c in system)

    def test_filter_by_type(self, client, alice):
        categories = client.get("/api/categories?type=income", headers=alice.headers).json()
        assert {c["type"] for c in categories} == {"income"}

    def test_bad_type_filter(self, client, alice):
        response = client.get("/api/categories?type=INCOME", headers=alice.headers)
        assert response.status_code == 400

    def test_list_for_other_user(self, client, alice, bob, manager):
        create_category(client, bob, "Bob only", "expense")
        assert client.get(f"/api/categories/user/{bob.id}", headers=alice.headers).status_code == 403
        response = client.get(f"/api/categories/user/{bob.id}", headers=manager.headers)
        assert response.status_code == 200
        assert [c["name"] for c in response.json() if not c["is_system"]] == ["Bob only"]


class TestSystemCategories:
    def test_readable_by_plain_user(self, client, alice):
        housing_id = system_category_id(client, alice, "Housing")
        response = client.get(f"/api/categories/{housing_id}", headers=alice.headers)
        assert response.status_code == 200
        assert response.json()["is_system"] is True

    def test_admin_cannot_modify(self, client, admin):
        housing_id = system_category_id(client, admin, "Housing")
        response = client.put(
            f"/api/categories/{housing_id}", json={"name": "Home"}, headers=admin.headers
        )
        assert response.status_code == 403
        assert response.json() == {"error": "Cannot modify system categories"}

    def test_nobody_deletes(self, client, admin, alice):
        housing_id = system_category_id(client, admin, "Housing")
        for account in (admin, alice):
            response = client.delete(f"/api/categories/{housing_id}", headers=account.headers)
            assert response.status_code == 403
            assert response.json() == {"error": "Cannot delete system categories"}


class TestUpdateAndDelete:
    def test_rent_scenario(self, client, alice, bob, admin):
        """A's category: B is forbidden, admin succeeds and the change persists."""
        category = create_category(client, alice, "Rent", "expense")
        response = client.put(
            f"/api/categories/{category['id']}", json={"color": "#FF0000"}, headers=bob.headers
        )
        assert response.status_code == 403
        assert response.json() == {
            "error": "Access denied",
            "message": "You can only update your own categories",
        }

        response = client.put(
            f"/api/categories/{category['id']}", json={"color": "#FF0000"}, headers=admin.headers
        )
        assert response.status_code == 200
        stored = client.get(f"/api/categories/{category['id']}", headers=alice.headers).json()
        assert stored["color"] == "#FF0000"
        assert stored["user_id"] == alice.id

    def test_other_user_cannot_read(self, client, alice, bob):
        category = create_category(client, alice)
        response = client.get(f"/api/categories/{category['id']}", headers=bob.headers)
        assert response.status_code == 403

    def test_update_to_duplicate(self, client, alice):
        create_category(client, alice, "Rent", "expense")
        other = create_category(client, alice, "Food", "expense")
        response = client.put(
            f"/api/categories/{other['id']}", json={"name": "Rent"}, headers=alice.headers
        )
        assert response.status_code == 409

    def test_invalid_and_unknown_ids(self, client, alice):
        response = client.get("/api/categories/nope", headers=alice.headers)
        assert response.json() == {"error": "Invalid category ID format"}
        response = client.get(f"/api/categories/{MISSING_ID}", headers=alice.headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Category not found"}

    def test_delete_own(self, client, alice):
        category = create_category(client, alice)
        response = client.delete(f"/api/categories/{category['id']}", headers=alice.headers)
        assert response.status_code == 204
        assert client.get(f"/api/categories/{category['id']}", headers=alice.headers).status_code == 404

    def test_delete_referenced_category_conflicts(self, client, alice):
        category = create_category(client, alice)
        client.post(
            "/api/transactions",
            json={"category_id": category["id"], "amount": 5, "type": "expense", "date": "2024-01-01"},
            headers=alice.headers,
        )
        response = client.delete(f"/api/categories/{category['id']}", headers=alice.headers)
        assert response.status_code == 409
        assert response.json()["error"] == "Record is still in use"
