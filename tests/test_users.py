class TestCurrentUser:

    def test_me_returns_profile_with_municipality(self, client, auth_headers):
        response = client.get("/users/me", headers=auth_headers("citizen_a"))

        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["id"] == "citizen_a"
        assert user["role"] == "citizen"
        assert user["municipality"] == {"id": "m1", "name": "City of Tshwane", "province": "Gauteng"}

    def test_me_is_not_treated_as_an_id(self, client, auth_headers):
        # an official would otherwise hit the /users/{id} lookup for "me"
        response = client.get("/users/me", headers=auth_headers("official_c"))
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == "official_c"

    def test_me_without_municipality(self, client, auth_headers):
        user = client.get("/users/me", headers=auth_headers("citizen_n")).json()["data"]["user"]
        assert user["municipality_id"] is None
        assert user["municipality"] is None

    def test_me_requires_token(self, client):
        assert client.get("/users/me").status_code == 401


class TestGetUser:

    def test_own_profile_by_id(self, client, auth_headers):
        assert client.get("/users/citizen_a", headers=auth_headers("citizen_a")).status_code == 200

    def test_official_sees_resident(self, client, auth_headers):
        response = client.get("/users/citizen_a", headers=auth_headers("official_c"))
        assert response.status_code == 200
        assert response.json()["data"]["user"]["name"] == "Alice Mokoena"

    def test_official_of_other_municipality_is_forbidden(self, client, auth_headers):
        response = client.get("/users/citizen_a", headers=auth_headers("official_b"))
        assert response.status_code == 403
        assert "Alice" not in response.text

    def test_citizen_cannot_see_other_citizen(self, client, auth_headers):
        assert client.get("/users/citizen_d", headers=auth_headers("citizen_a")).status_code == 403

    def test_missing_user(self, client, auth_headers):
        response = client.get("/users/nobody", headers=auth_headers("official_c"))
        assert response.status_code == 404
        assert response.json()["error"] == "User not found"
