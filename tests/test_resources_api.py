from conftest import auth

def test_director_publishes_resource(client, school):
    resp = client.post(
        "/api/resources",
        json={"title": "Fire exits", "type": "guideline", "content": "Follow the green signs", "tags": "fire,exits"},
        headers=auth(school["director"]),
    )
    assert resp.status_code == 201
    assert resp.json()["tags"] == ["fire", "exits"]
    assert resp.json()["isPublic"] is True

def test_unknown_resource_type(client, school):
    resp = client.post(
        "/api/resources",
        json={"title": "Podcast", "type": "audio", "content": "..."},
        headers=auth(school["director"]),
    )
    assert resp.status_code == 400

def test_teacher_cannot_publish(client, school):
    resp = client.post(
        "/api/resources",
        json={"title": "x", "type": "article", "content": "y"},
        headers=auth(school["teacher"]),
    )
    assert resp.status_code == 403

def test_complete_twice(client, make, school):
    resource = make.resource(school["tenant"], school["director"])
    headers = auth(school["student"])
    first = client.post(f"/api/resources/{resource.id}/complete", json={"timeSpent": 90}, headers=headers)
    assert first.status_code == 201
    assert first.json()["timeSpent"] == 90

    second = client.post(f"/api/resources/{resource.id}/complete", headers=headers)
    assert second.status_code == 400
    assert second.json() == {"success": False, "message": "Resource already completed"}

    mine = client.get("/api/resources/completions", headers=headers).json()
    assert [c["resourceId"] for c in mine] == [resource.id]

def test_delete_other_tenant_resource(client, make, school):
    elsewhere = make.tenant()
    resource = make.resource(elsewhere, make.user(elsewhere, "director"))
    resp = client.delete(f"/api/resources/{resource.id}", headers=auth(school["director"]))
    assert resp.status_code == 404
