from conftest import auth, PASSWORD

def test_register_school_creates_director(client):
    resp = client.post("/api/tenants/register", json={
        "firstName": "Rosa",
        "lastName": "Diaz",
        "email": "Rosa@Example.com",
        "password": PASSWORD,
        "schoolName": "  Lakeside Primary ",
    })
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["tenant"]["name"] == "Lakeside Primary"
    assert data["user"]["role"] == "director"
    assert data["user"]["email"] == "rosa@example.com"

    headers = {"Authorization": f"Bearer {data['token']}"}
    stats = client.get("/api/director/stats", headers=headers)
    assert stats.status_code == 200
    assert stats.json()["totalTeachers"] == 0

def test_register_existing_school_name(client, school):
    resp = client.post("/api/tenants/register", json={
        "firstName": "A", "lastName": "B", "email": "new@example.com",
        "password": PASSWORD, "schoolName": "Hillside High",
    })
    assert resp.status_code == 400
    assert resp.json()["message"] == "School/Institute already exists"

def test_public_school_list(client, make, school):
    make.tenant(name="Closed Academy", is_active=False)
    resp = client.get("/api/tenants/schools/list")
    assert resp.status_code == 200
    names = [s["name"] for s in resp.json()["data"]]
    assert names == ["Hillside High"]

def test_director_updates_contacts(client, school):
    tenant = school["tenant"]
    resp = client.put(
        f"/api/tenants/{tenant.id}",
        headers=auth(school["director"]),
        json={"address": "1 Hill Rd", "emergencyContacts": [{"name": "Nurse", "phone": "5551234567", "role": "medic"}]},
    )
    assert resp.status_code == 200
    assert resp.json()["address"] == "1 Hill Rd"
    assert resp.json()["emergencyContacts"][0]["name"] == "Nurse"

def test_teacher_cannot_update_school(client, school):
    resp = client.put(f"/api/tenants/{school['tenant'].id}", headers=auth(school["teacher"]), json={"address": "x"})
    assert resp.status_code == 403

def test_other_school_is_not_found(client, make, school):
    other = make.tenant()
    resp = client.get(f"/api/tenants/{other.id}", headers=auth(school["director"]))
    assert resp.status_code == 404

def test_deactivated_school_locks_out_users(client, school):
    headers = auth(school["teacher"])
    resp = client.delete(f"/api/tenants/{school['tenant'].id}", headers=auth(school["director"]))
    assert resp.status_code == 200
    assert client.get("/api/auth/me", headers=headers).status_code == 401
