from fastapi.testclient import TestClient

from setshaba.main import create_app


def break_collection(db, monkeypatch, name):
    original = db.collection

    def collection(collection_name):
        if collection_name == name:
            raise RuntimeError("store unavailable")
        return original(collection_name)

    monkeypatch.setattr(db, "collection", collection)


class TestErrorEnvelope:

    def test_domain_error_shape(self, client, auth_headers):
        response = client.get("/reports/missing", headers=auth_headers("citizen_a"))

        body = response.json()
        assert set(body) == {"error", "statusCode", "timestamp"}
        assert body["statusCode"] == 404

    def test_validation_error_has_details(self, client):
        response = client.post("/auth/login", json={})

        body = response.json()
        assert response.status_code == 400
        assert body["statusCode"] == 400
        assert {tuple(d["loc"]) for d in body["details"]} == {("body", "email"), ("body", "password")}

    def test_unknown_route(self, client):
        response = client.get("/no/such/route")
        assert response.status_code == 404
        assert response.json()["error"] == "API endpoint not found"

    def test_method_not_allowed_keeps_envelope(self, client):
        response = client.delete("/municipalities")
        assert response.status_code == 405
        assert response.json()["statusCode"] == 405

    def test_store_failure_is_internal_with_detail_outside_production(self, client, db, monkeypatch):
        break_collection(db, monkeypatch, "municipalities")

        response = client.get("/municipalities")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal server error"
        assert body["detail"] == "store unavailable"

    def test_production_hides_detail(self, test_settings, db, identity, geocoder, monkeypatch):
        prod_settings = test_settings.model_copy(update={"ENVIRONMENT": "production"})
        client = TestClient(create_app(prod_settings, db=db, identity=identity, geocoder=geocoder))
        break_collection(db, monkeypatch, "municipalities")

        body = client.get("/municipalities").json()

        assert body["statusCode"] == 500
        assert "detail" not in body

    def test_unhandled_exception(self, app):
        @app.get("/explode")
        def explode():
            raise ValueError("kaboom")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/explode")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"

    def test_identity_failure_is_internal(self, client, identity, monkeypatch):
        def verify_token(token):
            raise ConnectionError("identity service down")

        monkeypatch.setattr(identity, "verify_token", verify_token)

        response = client.get("/users/me", headers={"Authorization": "Bearer abc"})
        assert response.status_code == 500


class TestHealth:

    def test_root(self, client):
        body = client.get("/").json()
        assert body["service"] == "Setshaba Connect API"
        assert body["status"] == "running"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"

    def test_db_health(self, client):
        body = client.get("/health/db").json()
        assert body["connected"] is True
        assert body["collections_count"] == 2

    def test_db_health_failure(self, client, db, monkeypatch):
        def collections():
            raise RuntimeError("unreachable")

        monkeypatch.setattr(db, "collections", collections)

        response = client.get("/health/db")
        assert response.status_code == 503
        assert response.json()["error"] == "Database connection failed"
