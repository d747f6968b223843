"""Tests for the part lookup and import API endpoints."""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.db import PartStore
from app.main import app, build_session

CSV_CONTENT = b"PartNumber,EMP_Location\nA1,Shelf2\n4123,A-01-02\n"


@pytest_asyncio.fixture
async def client(store):
    """App wired to the temp store (ASGITransport does not run the lifespan)."""
    app.state.store = store
    app.state.session = build_session(store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _upload(client, name, content, content_type):
    return await client.post("/parts/import", files={"file": (name, content, content_type)})


@pytest.mark.asyncio
async def test_import_csv_then_lookup(client):
    response = await _upload(client, "parts.csv", CSV_CONTENT, "text/csv")
    assert response.status_code == 200
    assert response.json() == {"status": "imported", "count": 2}

    response = await client.get("/parts/lookup", params={"part_number": "P4123"})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "found"
    assert data["record"]["location"] == "A-01-02"
    assert data["display_text"].startswith("Part details\nscanned part number: 4123")


@pytest.mark.asyncio
async def test_import_xlsx(client, make_xlsx):
    content = make_xlsx([("Part", "Ref", "Loc"), (1000000, "NR", "Bay 4")])
    response = await _upload(
        client,
        "locations.xlsx",
        content,
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    assert response.status_code == 200
    assert response.json()["count"] == 1

    response = await client.get("/parts/lookup", params={"part_number": "1000000"})
    assert response.json()["record"]["new_reference"] == "NR"


@pytest.mark.asyncio
async def test_lookup_not_found(client):
    response = await client.get("/parts/lookup", params={"part_number": "ZZZ"})
    assert response.status_code == 404
    assert response.json() == {"status": "not_found", "message": "Part not found.\nNumber scanned: ZZZ"}


@pytest.mark.asyncio
async def test_lookup_empty_rejected(client):
    response = await client.get("/parts/lookup")
    assert response.status_code == 400
    assert response.json()["status"] == "rejected"


@pytest.mark.asyncio
async def test_lookup_storage_fault(client, tmp_path):
    app.state.session = build_session(PartStore(tmp_path / "never-opened.db"))
    response = await client.get("/parts/lookup", params={"part_number": "A1"})
    assert response.status_code == 503
    assert response.json()["status"] == "error"


@pytest.mark.asyncio
async def test_import_bad_header(client):
    await _upload(client, "parts.csv", CSV_CONTENT, "text/csv")
    response = await _upload(client, "parts.csv", b"Foo,Bar\nX,Y\n", "text/csv")
    assert response.status_code == 422
    assert response.json()["kind"] == "invalid_format"

    count = await client.get("/parts/count")
    assert count.json() == {"count": 2}


@pytest.mark.asyncio
async def test_import_unsupported_type(client):
    response = await _upload(client, "notes.txt", b"hello", "text/plain")
    assert response.status_code == 415
    assert response.json() == {"status": "rejected", "message": "unsupported input"}


@pytest.mark.asyncio
async def test_list_parts(client):
    await _upload(client, "parts.csv", CSV_CONTENT, "text/csv")
    response = await client.get("/parts", params={"limit": 1})
    data = response.json()
    assert data["count"] == 1
    assert data["total"] == 2
    assert data["parts"][0]["part_number"] == "4123"


@pytest.mark.asyncio
async def test_list_parts_storage_fault(client, tmp_path):
    app.state.store = PartStore(tmp_path / "never-opened.db")
    response = await client.get("/parts")
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_state_follows_last_call(client):
    response = await client.get("/parts/state")
    assert response.json()["phase"] == "idle"

    await client.get("/parts/lookup", params={"part_number": "ZZZ"})
    response = await client.get("/parts/state")
    assert response.json() == {
        "phase": "error",
        "result": None,
        "message": "Part not found.\nNumber scanned: ZZZ",
    }


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "healthy"}
