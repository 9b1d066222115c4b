def _create_event(client, **overrides):
    payload = {
        "title": "Retro",
        "description": "sprint 12",
        "start_date": "2024-01-01",
        "end_date": "2024-01-02",
        "start_time": "09:00",
        "end_time": "11:00",
    }
    payload.update(overrides)
    return client.post("/w2m/events", json=payload)


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["redis"] == "healthy"
    assert body["store"] == "InMemoryPollStore"


def test_list_events_empty(client):
    res = client.get("/w2m/events")
    assert res.status_code == 200
    assert res.json() == {"events": []}


def test_create_and_get_event(client):
    res = _create_event(client)
    assert res.status_code == 201
    body = res.json()
    assert body["slot_count"] == 8
    event_id = body["event"]["id"]

    res = client.get(f"/w2m/events/{event_id}")
    assert res.status_code == 200
    detail = res.json()
    assert detail["event"]["title"] == "Retro"
    assert len(detail["slots"]) == 8
    assert detail["participants"] == []
    assert detail["heatmap"]["rows"] == ["09:00", "09:30", "10:00", "10:30"]
    assert all(c["bucket"] == "none" for c in detail["heatmap"]["cells"])

    listed = client.get("/w2m/events").json()["events"]
    assert [e["id"] for e in listed] == [event_id]


def test_create_event_bad_date_format(client):
    res = _create_event(client, start_date="01/01/2024")
    assert res.status_code == 422


def test_create_event_blank_title(client):
    res = _create_event(client, title="   ")
    assert res.status_code == 422
    assert res.json()["error"] == "validation_error"


def test_get_unknown_event(client):
    res = client.get("/w2m/events/doesnotexist")
    assert res.status_code == 404
    body = res.json()
    assert body["error"] == "not_found"
    assert body["context"] == {"event_id": "doesnotexist"}


def test_submit_and_reload_with_participant(client):
    event_id = _create_event(client).json()["event"]["id"]
    slots = client.get(f"/w2m/events/{event_id}").json()["slots"]
    marked = [slots[0]["id"], slots[3]["id"]]

    res = client.post(
        f"/w2m/events/{event_id}/availability",
        json={"participant_name": "ana", "unavailable_slot_ids": marked},
    )
    assert res.status_code == 200
    detail = res.json()
    assert detail["participants"] == ["ana"]
    assert detail["selected"] == sorted(marked)
    assert len(detail["responses"]) == 8

    seeded = client.get(f"/w2m/events/{event_id}", params={"participant": "ana"}).json()
    assert seeded["selected"] == sorted(marked)
    unseeded = client.get(f"/w2m/events/{event_id}").json()
    assert unseeded["selected"] == []


def test_submit_requires_name(client):
    event_id = _create_event(client).json()["event"]["id"]
    res = client.post(
        f"/w2m/events/{event_id}/availability",
        json={"participant_name": " ", "unavailable_slot_ids": []},
    )
    assert res.status_code == 422
    assert res.json()["detail"] == "Please enter your name"


def test_selection_drag(client):
    event_id = _create_event(client).json()["event"]["id"]
    slots = client.get(f"/w2m/events/{event_id}").json()["slots"]
    ids = [s["id"] for s in slots]

    res = client.post(
        f"/w2m/events/{event_id}/selection",
        json={"selected": [], "anchor": [0, 0], "current": [1, 1]},
    )
    assert res.status_code == 200
    body = res.json()
    expected = sorted([ids[0], ids[1], ids[4], ids[5]])
    assert body["selected"] == expected
    assert body["changed"] == expected

    res = client.post(
        f"/w2m/events/{event_id}/selection",
        json={"selected": expected, "anchor": [1, 1], "current": [1, 0]},
    )
    assert res.json()["selected"] == sorted([ids[0], ids[4]])


def test_best_slots(client):
    event_id = _create_event(client).json()["event"]["id"]
    slots = client.get(f"/w2m/events/{event_id}").json()["slots"]
    everything_but_first = [s["id"] for s in slots[1:]]
    client.post(
        f"/w2m/events/{event_id}/availability",
        json={"participant_name": "ana", "unavailable_slot_ids": everything_but_first},
    )
    client.post(
        f"/w2m/events/{event_id}/availability",
        json={"participant_name": "bo", "unavailable_slot_ids": []},
    )

    res = client.get(f"/w2m/events/{event_id}/best", params={"limit": 2})
    assert res.status_code == 200
    body = res.json()
    assert body["participant_count"] == 2
    assert body["slots"][0]["slot"]["id"] == slots[0]["id"]
    assert body["slots"][0]["bucket"] == "full"
    assert body["slots"][1]["count"] == 1


def test_metrics_exposed(client):
    client.get("/w2m/events")
    res = client.get("/metrics")
    assert res.status_code == 200
    assert "http_requests_total" in res.text
