def test_unknown_class_returns_structured_not_found(client, elective_fixture):
    response = client.post("/api/electives/status/9999")

    assert response.status_code == 404
    assert response.json() == {
        "message": "Class with id 9999 not found",
        "details": {"resource_type": "Class", "resource_id": 9999},
    }


def test_invalid_class_id_is_rejected(client):
    response = client.post("/api/electives/status/0")

    assert response.status_code == 422
    assert response.json()["detail"] == "Invalid class id"


def test_status_lifecycle(client, elective_fixture):
    class_id = elective_fixture["classes"]["5A"].id

    assert client.get(f"/api/electives/status/{class_id}").status_code == 404

    updated = client.post(f"/api/electives/status/{class_id}")
    assert updated.status_code == 200
    body = updated.json()
    assert body["class_name"] == "5/A"
    assert body["status"] == "incomplete"
    assert body["missing_electives"] == 2

    fetched = client.get(f"/api/electives/status/{class_id}")
    assert fetched.status_code == 200
    assert fetched.json()["assigned_electives"] == 1


def test_refresh_and_reports(client, elective_fixture):
    refreshed = client.post("/api/electives/status/refresh")
    assert refreshed.status_code == 200
    assert refreshed.json() == {"refreshed": 4, "failed": 0, "failed_class_ids": []}

    statuses = client.get("/api/electives/status").json()
    assert len(statuses) == 4

    incomplete = client.get("/api/electives/incomplete").json()
    assert incomplete[0]["class_name"] == "6/A"
    assert incomplete[0]["severity"] == "critical"

    statistics = client.get("/api/electives/statistics").json()
    assert statistics["total_classes"] == 4
    assert statistics["incomplete_classes"] == 4
    assert statistics["completion_percentage"] == 0

    assert client.get("/api/electives/completion").json() == {"completion_percentage": 0}

    distribution = client.get("/api/electives/distribution").json()
    assert distribution[0] == {"lesson_name": "Drama", "assignment_count": 2, "percentage": 67}


def test_refresh_by_school_type(client, elective_fixture):
    response = client.post("/api/electives/status/refresh", params={"school_type": "Fen Lisesi"})

    assert response.json() == {"refreshed": 0, "failed": 0, "failed_class_ids": []}


def test_generate_score_and_apply_flow(client, elective_fixture):
    class_id = elective_fixture["classes"]["5A"].id
    drama_id = elective_fixture["lessons"]["drama"].id
    deniz_id = elective_fixture["teachers"]["deniz"].id

    generated = client.post(f"/api/suggestions/classes/{class_id}/generate")
    assert generated.status_code == 200
    suggestions = generated.json()
    assert [item["suggestion_score"] for item in suggestions] == [75.79, 75.0, 65.0, 63.29, 10.79]

    cached = client.get(f"/api/suggestions/classes/{class_id}").json()
    assert [item["id"] for item in cached] == [item["id"] for item in suggestions]

    score = client.get(
        "/api/suggestions/score",
        params={"class_id": class_id, "lesson_id": drama_id, "teacher_id": deniz_id},
    )
    assert score.json()["score"] == 75.79

    top_id = suggestions[0]["id"]
    assert client.post(f"/api/suggestions/{top_id}/apply").json() == {"success": True}
    assert client.post(f"/api/suggestions/{top_id}/apply").json() == {"success": False}

    status = client.post(f"/api/electives/status/{class_id}").json()
    assert status["assigned_electives"] == 2


def test_generate_accepts_criteria_overrides(client, elective_fixture):
    class_id = elective_fixture["classes"]["5A"].id

    response = client.post(
        f"/api/suggestions/classes/{class_id}/generate",
        json={"max_suggestions": 2, "prefer_popular": False},
    )

    assert response.status_code == 200
    assert [(item["lesson_name"], item["teacher_name"]) for item in response.json()] == [
        ("Robotics", "Ece"),
        ("Music Workshop", "Ece"),
    ]


def test_generate_for_unknown_class_is_not_found(client, elective_fixture):
    response = client.post("/api/suggestions/classes/9999/generate")

    assert response.status_code == 404
    assert response.json()["details"]["resource_type"] == "Class"


def test_refresh_suggestion_cache(client, elective_fixture):
    client.post("/api/electives/status/refresh")

    response = client.post("/api/suggestions/refresh")

    assert response.status_code == 200
    assert response.json() == {"classes_refreshed": 4}
