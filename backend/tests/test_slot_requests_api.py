from fastapi.testclient import TestClient


def _offer(client: TestClient, headers, user="coach-a", team="A", division="10U", **overrides):
    body = {
        "division": division,
        "offeringTeamId": team,
        "gameDate": "2026-04-10",
        "startTime": "18:00",
        "endTime": "20:00",
        "fieldKey": "central/f1",
    }
    body.update(overrides)
    response = client.post("/api/slots", json=body, headers=headers(user))
    assert response.status_code == 201
    return response.json()["data"]


def test_claim_then_second_claim(client: TestClient, league, headers):
    slot = _offer(client, headers)
    url = f"/api/slots/10U/{slot['slotId']}/requests"

    response = client.post(url, json={"notes": "We're in"}, headers=headers("coach-b"))
    assert response.status_code == 201
    claim = response.json()["data"]
    assert claim["status"] == "Approved"
    assert claim["slotStatus"] == "Confirmed"
    assert claim["confirmedTeamId"] == "B"
    assert claim["requestId"]

    current = client.get(f"/api/slots/10U/{slot['slotId']}", headers=headers("coach-a")).json()["data"]
    assert current["status"] == "Confirmed"
    assert current["confirmedRequestId"] == claim["requestId"]

    response = client.post(url, headers=headers("coach-c"))
    assert response.status_code == 409
    assert response.json()["error"]["code"] in ("NOT_OPEN", "CONFLICT")


def test_claim_requires_a_team(client: TestClient, league, headers):
    slot = _offer(client, headers)
    response = client.post(f"/api/slots/10U/{slot['slotId']}/requests", headers=headers("admin"))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "TEAM_REQUIRED"


def test_double_booking_response(client: TestClient, league, headers, make_slot):
    blocking = make_slot(division="12U", offering_team_id="X", status="Confirmed", confirmed_team_id="A")
    offer = _offer(client, headers, startTime="19:00", endTime="21:00")

    response = client.post(f"/api/slots/10U/{offer['slotId']}/requests", headers=headers("coach-d"))

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "DOUBLE_BOOKING"
    assert error["details"]["conflicts"][0]["conflict"]["slotId"] == blocking.slot_id
    assert error["details"]["conflicts"][0]["conflict"]["division"] == "12U"


def test_self_claim(client: TestClient, league, headers):
    slot = _offer(client, headers)
    response = client.post(f"/api/slots/10U/{slot['slotId']}/requests", headers=headers("coach-a"))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "SELF_CLAIM"


def test_list_claims_newest_first(client: TestClient, league, headers, make_slot, make_pending_claim):
    slot = make_slot()
    first = make_pending_claim(slot, "B")
    second = make_pending_claim(slot, "C")

    response = client.get(f"/api/slots/10U/{slot.slot_id}/requests", headers=headers("viewer"))

    assert response.status_code == 200
    rows = response.json()["data"]
    assert {r["requestId"] for r in rows} == {first.request_id, second.request_id}
    assert rows[0]["requestedAt"] >= rows[1]["requestedAt"]
    assert all(r["status"] == "Pending" for r in rows)

    response = client.get("/api/slots/10U/missing/requests", headers=headers("viewer"))
    assert response.status_code == 404

    response = client.get(f"/api/slots/10U/{slot.slot_id}/requests", headers=headers("outsider"))
    assert response.status_code == 403


def test_legacy_approve_endpoint(client: TestClient, league, headers, make_slot, make_pending_claim):
    slot = make_slot(legacy=True)
    claim = make_pending_claim(slot, "B", legacy=True)
    url = f"/api/slots/10U/{slot.slot_id}/requests/{claim.request_id}/approve"

    response = client.patch(url, json={"approvedByEmail": "ops@example.com"}, headers=headers("admin"))
    assert response.status_code == 200
    assert response.json()["data"] == {
        "ok": True,
        "slotId": slot.slot_id,
        "division": "10U",
        "requestId": claim.request_id,
        "status": "Confirmed",
    }

    # No body is fine too, and a repeat is idempotent
    response = client.patch(url, headers=headers("admin"))
    assert response.status_code == 200

    current = client.get(f"/api/slots/10U/{slot.slot_id}", headers=headers("admin")).json()["data"]
    assert current["status"] == "Confirmed"
    assert current["confirmedTeamId"] == "B"
    assert current["confirmedBy"] == "ops@example.com"


def test_approve_on_cancelled_slot(client: TestClient, league, headers, make_slot, make_pending_claim):
    slot = make_slot(status="Cancelled")
    claim = make_pending_claim(slot, "B")
    response = client.patch(
        f"/api/slots/10U/{slot.slot_id}/requests/{claim.request_id}/approve", headers=headers("admin")
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CANCELLED"
