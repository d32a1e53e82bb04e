class TestUpdateReport:

    def test_status_change_records_history(self, client, auth_headers, create_report):
        report = create_report()

        response = client.put(
            f"/reports/{report['id']}", json={"status": "acknowledged"}, headers=auth_headers("official_c")
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Report updated successfully"
        updated = response.json()["data"]["report"]
        assert updated["status"] == "acknowledged"
        assert updated["resolved_at"] is None
        last = updated["status_history"][-1]
        assert (last["from_status"], last["to_status"], last["changed_by"]) == ("open", "acknowledged", "official_c")

    def test_resolving_stamps_resolved_at_once(self, client, auth_headers, create_report):
        report = create_report()
        headers = auth_headers("official_c")

        resolved = client.put(f"/reports/{report['id']}", json={"status": "resolved"}, headers=headers)
        first_resolved_at = resolved.json()["data"]["report"]["resolved_at"]
        assert first_resolved_at is not None

        client.put(f"/reports/{report['id']}", json={"status": "in_progress"}, headers=headers)
        again = client.put(f"/reports/{report['id']}", json={"status": "resolved"}, headers=headers)

        assert again.json()["data"]["report"]["resolved_at"] == first_resolved_at
        assert len(again.json()["data"]["report"]["status_history"]) == 4

    def test_same_status_adds_no_history(self, client, auth_headers, create_report):
        report = create_report()
        response = client.put(f"/reports/{report['id']}", json={"status": "open"}, headers=auth_headers("official_c"))
        assert len(response.json()["data"]["report"]["status_history"]) == 1

    def test_assign_official_of_same_municipality(self, client, auth_headers, create_report):
        report = create_report()

        response = client.put(
            f"/reports/{report['id']}", json={"assigned_official": "official_f"}, headers=auth_headers("official_c")
        )

        assert response.status_code == 200
        updated = response.json()["data"]["report"]
        assert updated["assigned_official"] == "official_f"
        assert updated["assigned_official_user"]["name"] == "Fatima Patel"

    def test_assignee_from_other_municipality_is_rejected(self, client, auth_headers, create_report, db):
        report = create_report()

        response = client.put(
            f"/reports/{report['id']}",
            json={"assigned_official": "official_e", "status": "in_progress"},
            headers=auth_headers("official_c"),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid official assignment"
        stored = db.collection("reports").document(report["id"]).get().to_dict()
        assert stored["assigned_official"] is None
        assert stored["status"] == "open"

    def test_assignee_must_be_an_official(self, client, auth_headers, create_report):
        report = create_report()
        response = client.put(
            f"/reports/{report['id']}", json={"assigned_official": "citizen_d"}, headers=auth_headers("official_c")
        )
        assert response.status_code == 400

    def test_unknown_assignee(self, client, auth_headers, create_report):
        report = create_report()
        response = client.put(
            f"/reports/{report['id']}", json={"assigned_official": "nobody"}, headers=auth_headers("official_c")
        )
        assert response.status_code == 400

    def test_null_clears_assignment(self, client, auth_headers, seed_report):
        report_id = seed_report(assigned_official="official_f")

        response = client.put(f"/reports/{report_id}", json={"assigned_official": None}, headers=auth_headers("official_c"))

        updated = response.json()["data"]["report"]
        assert updated["assigned_official"] is None
        assert updated["assigned_official_user"] is None

    def test_category_change(self, client, auth_headers, create_report):
        report = create_report()
        response = client.put(f"/reports/{report['id']}", json={"category": "sewage"}, headers=auth_headers("official_c"))
        assert response.json()["data"]["report"]["category"] == "sewage"

    def test_immutable_fields_are_ignored(self, client, auth_headers, create_report):
        report = create_report()

        response = client.put(
            f"/reports/{report['id']}",
            json={"status": "closed", "municipality_id": "m2", "created_by": "citizen_d", "id": "other"},
            headers=auth_headers("official_c"),
        )

        updated = response.json()["data"]["report"]
        assert updated["id"] == report["id"]
        assert updated["municipality_id"] == "m1"
        assert updated["created_by"] == "citizen_a"
        assert updated["status"] == "closed"

    def test_empty_patch_is_rejected(self, client, auth_headers, create_report):
        report = create_report()
        response = client.put(f"/reports/{report['id']}", json={"title": "new"}, headers=auth_headers("official_c"))
        assert response.status_code == 400
        assert response.json()["error"] == "No updatable fields supplied"

    def test_other_municipality_is_forbidden(self, client, auth_headers, create_report, db):
        report = create_report()

        response = client.put(f"/reports/{report['id']}", json={"status": "closed"}, headers=auth_headers("official_b"))

        assert response.status_code == 403
        assert db.collection("reports").document(report["id"]).get().to_dict()["status"] == "open"

    def test_not_found_before_forbidden(self, client, auth_headers):
        response = client.put("/reports/missing", json={"status": "closed"}, headers=auth_headers("official_b"))
        assert response.status_code == 404

    def test_forbidden_before_invalid_assignment(self, client, auth_headers, create_report):
        report = create_report()
        response = client.put(
            f"/reports/{report['id']}", json={"assigned_official": "official_e"}, headers=auth_headers("official_b")
        )
        assert response.status_code == 403

    def test_invalid_status_value(self, client, auth_headers, create_report):
        report = create_report()
        response = client.put(f"/reports/{report['id']}", json={"status": "done"}, headers=auth_headers("official_c"))
        assert response.status_code == 400

    def test_null_status_or_category_is_an_empty_patch(self, client, auth_headers, seed_report, db):
        report_id = seed_report()
        before = db.collection("reports").document(report_id).get().to_dict()

        for body in ({"status": None}, {"category": None}, {"status": None, "category": None}):
            response = client.put(f"/reports/{report_id}", json=body, headers=auth_headers("official_c"))
            assert response.status_code == 400
            assert response.json()["error"] == "No updatable fields supplied"

        assert db.collection("reports").document(report_id).get().to_dict() == before

    def test_null_category_alongside_a_real_change(self, client, auth_headers, seed_report):
        report_id = seed_report(category="roads")

        response = client.put(
            f"/reports/{report_id}", json={"status": "acknowledged", "category": None}, headers=auth_headers("official_c")
        )

        report = response.json()["data"]["report"]
        assert report["status"] == "acknowledged"
        assert report["category"] == "roads"
