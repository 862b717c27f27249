def test_health_endpoints(client):
    live = client.get("/api/health")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert payload["database"]["ok"] is True
    assert payload["electives"]["required_per_class"] == 3
    assert payload["electives"]["weekly_hour_limits"]["Ortaokul"] == 35
