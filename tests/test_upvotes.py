import pytest
from google.api_core.exceptions import AlreadyExists

from setshaba.models.user import CurrentUser, Role
from setshaba.services.vote_service import VoteService, upvote_id


class TestToggleUpvote:

    def test_first_toggle_adds_upvote(self, client, auth_headers, seed_report):
        report_id = seed_report()

        response = client.post(f"/reports/{report_id}/upvote", headers=auth_headers("citizen_d"))

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Report upvoted"
        assert body["data"] == {"upvoted": True, "upvote_count": 1}

    def test_second_toggle_removes_it(self, client, auth_headers, seed_report, db):
        report_id = seed_report()
        headers = auth_headers("citizen_d")

        client.post(f"/reports/{report_id}/upvote", headers=headers)
        response = client.post(f"/reports/{report_id}/upvote", headers=headers)

        assert response.json()["data"] == {"upvoted": False, "upvote_count": 0}
        assert response.json()["message"] == "Upvote removed"
        assert not db.collection("report_upvotes").document(upvote_id(report_id, "citizen_d")).get().exists

    def test_upvotes_from_different_citizens_accumulate(self, client, auth_headers, seed_report):
        report_id = seed_report()

        client.post(f"/reports/{report_id}/upvote", headers=auth_headers("citizen_d"))
        response = client.post(f"/reports/{report_id}/upvote", headers=auth_headers("citizen_g"))

        assert response.json()["data"] == {"upvoted": True, "upvote_count": 2}
        report = client.get(f"/reports/{report_id}", headers=auth_headers("citizen_a")).json()["data"]["report"]
        assert report["upvote_count"] == 2

    def test_author_cannot_upvote(self, client, auth_headers, seed_report, db):
        report_id = seed_report(created_by="citizen_a")

        response = client.post(f"/reports/{report_id}/upvote", headers=auth_headers("citizen_a"))

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot upvote your own report"
        assert list(db.collection("report_upvotes").stream()) == []

    def test_missing_report(self, client, auth_headers):
        response = client.post("/reports/nope/upvote", headers=auth_headers("citizen_d"))
        assert response.status_code == 404

    def test_not_found_is_checked_before_self_upvote(self, client, auth_headers):
        # nothing to compare authorship with when the report is missing
        response = client.post("/reports/nope/upvote", headers=auth_headers("citizen_a"))
        assert response.status_code == 404

    def test_officials_cannot_upvote(self, client, auth_headers, seed_report):
        report_id = seed_report()
        assert client.post(f"/reports/{report_id}/upvote", headers=auth_headers("official_c")).status_code == 403


class RacingReference:
    """Upvote reference whose first existence check misses a concurrent insert."""

    def __init__(self, real):
        self._real = real
        self.id = real.id

    def get(self):
        snapshot = self._real.get()
        # another request inserts between our read and our create
        self._real.create({"report_id": "r001", "user_id": "citizen_d"})
        return snapshot

    def create(self, data):
        return self._real.create(data)

    def delete(self):
        return self._real.delete()


class RacingCollection:
    def __init__(self, real):
        self._real = real

    def document(self, document_id=None):
        return RacingReference(self._real.document(document_id))

    def where(self, *args):
        return self._real.where(*args)


class RacingStore:
    def __init__(self, db):
        self._db = db

    def collection(self, name):
        if name == "report_upvotes":
            return RacingCollection(self._db.collection(name))
        return self._db.collection(name)


def test_concurrent_insert_counts_as_upvoted(db, seed_report):
    report_id = seed_report(id="r001")
    caller = CurrentUser(id="citizen_d", role=Role.CITIZEN, municipality_id="m1")

    result = VoteService(RacingStore(db)).toggle_upvote(caller, report_id)

    assert result == {"upvoted": True, "upvote_count": 1}


def test_duplicate_create_is_rejected_by_store(db):
    ref = db.collection("report_upvotes").document(upvote_id("r1", "u1"))
    ref.create({"report_id": "r1", "user_id": "u1"})
    with pytest.raises(AlreadyExists):
        ref.create({"report_id": "r1", "user_id": "u1"})


def test_batched_counts_span_several_queries(db):
    report_ids = [f"r{i:03d}" for i in range(35)]
    upvotes = db.collection("report_upvotes")
    for voter in ("citizen_d", "citizen_g"):
        upvotes.document(upvote_id("r000", voter)).create({"report_id": "r000", "user_id": voter})
    upvotes.document(upvote_id("r034", "citizen_d")).create({"report_id": "r034", "user_id": "citizen_d"})

    counts = VoteService(db).count_upvotes_for(report_ids)

    assert len(counts) == 35
    assert counts["r000"] == 2
    assert counts["r034"] == 1
    assert counts["r017"] == 0


def test_listing_carries_upvote_counts(client, auth_headers, seed_report):
    popular = seed_report(minutes=1)
    quiet = seed_report(minutes=2)
    client.post(f"/reports/{popular}/upvote", headers=auth_headers("citizen_d"))
    client.post(f"/reports/{popular}/upvote", headers=auth_headers("citizen_g"))

    items = client.get("/reports", headers=auth_headers("official_c")).json()["data"]["items"]

    assert {item["id"]: item["upvote_count"] for item in items} == {popular: 2, quiet: 0}
