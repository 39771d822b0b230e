from conftest import auth

def create(client, school, **overrides):
    body = {"title": "Fire drill", "scheduledDate": "2024-05-01T10:00:00", "participants": [school["student"].id]}
    body.update(overrides)
    return client.post("/api/drills", json=body, headers=auth(school["teacher"]))

def test_schedule_drill(client, school):
    resp = create(client, school)
    assert resp.status_code == 201
    drill = resp.json()
    assert drill["status"] == "PENDING"
    assert drill["participants"][0]["firstName"] == "Ada"
    assert drill["creator"]["id"] == school["teacher"].id

def test_drills_sorted_by_date(client, school):
    create(client, school, title="Later", scheduledDate="2024-06-01T09:00:00")
    create(client, school, title="Sooner", scheduledDate="2024-04-01T09:00:00")
    drills = client.get("/api/drills", headers=auth(school["student"])).json()
    assert [d["title"] for d in drills] == ["Sooner", "Later"]

def test_foreign_participant(client, make, school):
    outsider = make.user(make.tenant(), "student")
    assert create(client, school, participants=[outsider.id]).status_code == 404

def test_status_update(client, school):
    drill_id = create(client, school).json()["id"]
    headers = auth(school["teacher"])
    resp = client.put(f"/api/drills/{drill_id}/status", json={"status": "COMPLETED", "feedback": "Took 4 minutes"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["feedback"] == "Took 4 minutes"

    bad = client.put(f"/api/drills/{drill_id}/status", json={"status": "DONE"}, headers=headers)
    assert bad.status_code == 400
    assert "PENDING, COMPLETED" in bad.json()["message"]

def test_delete_drill(client, school):
    drill_id = create(client, school).json()["id"]
    assert client.delete(f"/api/drills/{drill_id}", headers=auth(school["director"])).status_code == 403
    assert client.delete(f"/api/drills/{drill_id}", headers=auth(school["teacher"])).status_code == 200
    assert client.get("/api/drills", headers=auth(school["teacher"])).json() == []
