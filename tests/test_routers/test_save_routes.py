from app.services.leads import LEADS_COLLECTION


def _business(name: str, phone: str = "0912") -> dict:
    return {
        "name": name,
        "phoneNumber": phone,
        "instagram": "",
        "address": "Valiasr St",
        "email": "",
        "description": "",
    }


# --- Bulk mode ---


async def test_bulk_save(client, db):
    resp = await client.post("/api/save", json={
        "businesses": [_business("Cafe A", "1"), _business("Cafe B", "2")],
        "country": "Iran",
        "category": "resturants",
    })

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Saved 2 of 2 businesses",
        "saved": 2,
        "total": 2,
    }
    assert await db[LEADS_COLLECTION].count_documents({"country": "Iran"}) == 2


async def test_bulk_save_reports_duplicates(client):
    payload = {
        "businesses": [_business("Cafe A", "1")],
        "country": "Iran",
        "category": "other",
    }
    await client.post("/api/save", json=payload)

    payload["businesses"].append(_business("Cafe B", "2"))
    resp = await client.post("/api/save", json=payload)

    assert resp.status_code == 200
    data = resp.json()
    assert data["saved"] == 1
    assert data["total"] == 2
    assert data["message"] == "Saved 1 of 2 businesses"
    assert [e["name"] for e in data["errors"]] == ["Cafe A"]


async def test_bulk_save_empty_list(client):
    resp = await client.post("/api/save", json={
        "businesses": [], "country": "Iran", "category": "other",
    })
    assert resp.status_code == 400
    assert resp.json() == {"error": "No businesses to save"}


async def test_bulk_save_requires_country_and_category(client, db):
    resp = await client.post("/api/save", json={"businesses": [_business("Cafe A")]})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Country and category are required"}
    assert await db[LEADS_COLLECTION].count_documents({}) == 0


async def test_bulk_save_blank_name_rejects_batch(client, db):
    resp = await client.post("/api/save", json={
        "businesses": [_business("Cafe A", "1"), _business(" ", "2")],
        "country": "Iran",
        "category": "other",
    })
    assert resp.status_code == 400
    assert resp.json() == {"error": "Business name is required"}
    assert await db[LEADS_COLLECTION].count_documents({}) == 0


async def test_bulk_save_unknown_category(client):
    resp = await client.post("/api/save", json={
        "businesses": [_business("Cafe A")],
        "country": "Iran",
        "category": "spaceships",
    })
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("category:")


# --- Single mode ---


async def test_single_save(client):
    resp = await client.post("/api/save", json=_business("Cafe A"))

    assert resp.status_code == 201
    data = resp.json()
    assert data["success"] is True
    assert data["message"] == "Data saved successfully"
    assert data["data"]["name"] == "Cafe A"
    assert data["data"]["id"]


async def test_single_save_duplicate(client):
    await client.post("/api/save", json=_business("Cafe A"))
    resp = await client.post("/api/save", json=_business("Cafe A"))
    assert resp.status_code == 409
    assert resp.json() == {"error": "This entry already exists in the database"}


async def test_single_save_requires_name(client):
    resp = await client.post("/api/save", json={"phoneNumber": "0912"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Business name is required"}


async def test_save_rejects_non_object_body(client):
    resp = await client.post("/api/save", json=["not", "an", "object"])
    assert resp.status_code == 400
