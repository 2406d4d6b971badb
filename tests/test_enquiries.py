import pytest


def enquiry_payload(**overrides):
    payload = {
        "name": "Priya Sharma",
        "email": "priya.sharma@example.com",
        "phone": "+91-9876543240",
        "message": "Can you provide more details about amenities?",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_enquiry_defaults_source(client):
    response = await client.post("/api/enquiries", json=enquiry_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Enquiry submitted successfully"
    assert body["data"]["source"] == "website"
    assert body["data"]["branch_id"] is None


@pytest.mark.asyncio
async def test_create_enquiry_keeps_given_source(client, branch):
    response = await client.post("/api/enquiries", json=enquiry_payload(source="cta", branch_id=branch["id"]))

    assert response.status_code == 201
    assert response.json()["data"]["source"] == "cta"
    assert response.json()["data"]["branch_id"] == branch["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["name", "email", "phone"])
async def test_create_enquiry_requires_contact_fields(client, missing):
    payload = enquiry_payload()
    del payload[missing]

    response = await client.post("/api/enquiries", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


@pytest.mark.asyncio
async def test_create_enquiry_for_unknown_branch(client):
    response = await client.post("/api/enquiries", json=enquiry_payload(branch_id=424242))

    assert response.status_code == 400
    assert response.json()["error"] == "Branch not found"


@pytest.mark.asyncio
async def test_list_enquiries_filters(client, branch):
    await client.post("/api/enquiries", json=enquiry_payload(name="Rahul Kumar", branch_id=branch["id"]))
    await client.post("/api/enquiries", json=enquiry_payload(source="cta", branch_id=branch["id"]))
    await client.post("/api/enquiries", json=enquiry_payload(name="Amit Patel"))

    everything = await client.get("/api/enquiries")
    by_branch = await client.get("/api/enquiries", params={"branch_id": branch["id"]})
    by_source = await client.get("/api/enquiries", params={"source": "cta"})
    by_both = await client.get("/api/enquiries", params={"branch_id": branch["id"], "source": "website"})

    assert everything.json()["count"] == 3
    assert everything.json()["data"][0]["name"] == "Amit Patel"
    assert by_branch.json()["count"] == 2
    assert [e["source"] for e in by_source.json()["data"]] == ["cta"]
    assert [e["name"] for e in by_both.json()["data"]] == ["Rahul Kumar"]


@pytest.mark.asyncio
async def test_list_enquiries_with_invalid_branch_filter(client):
    response = await client.get("/api/enquiries", params={"branch_id": "abc"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid branch ID"


@pytest.mark.asyncio
async def test_get_enquiry_with_invalid_id(client):
    response = await client.get("/api/enquiries/abc")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid enquiry ID"


@pytest.mark.asyncio
async def test_get_missing_enquiry(client):
    response = await client.get("/api/enquiries/999999")

    assert response.status_code == 404
    assert response.json()["error"] == "Enquiry not found"


@pytest.mark.asyncio
async def test_update_enquiry_is_partial(client):
    created = (await client.post("/api/enquiries", json=enquiry_payload())).json()["data"]

    response = await client.put(f"/api/enquiries/{created['id']}", json={"message": "Is a double room free?"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["message"] == "Is a double room free?"
    assert data["name"] == created["name"]
    assert data["source"] == "website"


@pytest.mark.asyncio
async def test_update_enquiry_detaches_branch(client, branch):
    created = (await client.post("/api/enquiries", json=enquiry_payload(branch_id=branch["id"]))).json()["data"]

    response = await client.put(f"/api/enquiries/{created['id']}", json={"branch_id": None})

    assert response.status_code == 200
    assert response.json()["data"]["branch_id"] is None


@pytest.mark.asyncio
async def test_delete_enquiry(client):
    created = (await client.post("/api/enquiries", json=enquiry_payload())).json()["data"]

    response = await client.delete(f"/api/enquiries/{created['id']}")

    assert response.status_code == 200
    assert response.json()["data"]["id"] == created["id"]
    assert (await client.get(f"/api/enquiries/{created['id']}")).status_code == 404
