import os

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

# Isolated storage and no demo data for tests
os.environ["DATABASE_URL"] = ""
os.environ["SEED_DEMO_PATIENTS"] = "false"

from app.database import close_storage, get_storage, init_storage
from app.main import app
from app.services.patient_store import get_patient_store, reset_patient_store

VALID_INTAKE = {
    "firstName": "Jane",
    "lastName": "Doe",
    "dateOfBirth": "1990-04-12",
    "email": "jane.doe@example.com",
    "phone": "555-0100",
    "chiefComplaint": "Persistent cough",
}


@pytest.fixture
def intake():
    """A fresh copy of a minimal valid intake submission."""
    return dict(VALID_INTAKE)


@pytest_asyncio.fixture
async def storage(tmp_path):
    """Provide fresh JSON file storage in a temp directory for each test."""
    import app.database as db_mod

    if db_mod._storage is not None:
        await db_mod._storage.close()
    db_mod._storage = None
    reset_patient_store()

    # Override module-level config directly (avoids fragile importlib.reload)
    db_mod.DATA_FILE = str(tmp_path / "patients.json")
    db_mod.DATABASE_URL = ""

    await init_storage()
    yield await get_storage()
    await close_storage()
    reset_patient_store()


@pytest_asyncio.fixture
async def store(storage):
    return await get_patient_store()


@pytest.fixture
def client(storage):
    """Provide a synchronous TestClient for HTTP endpoint tests."""
    return TestClient(app)


@pytest_asyncio.fixture
async def async_client(storage):
    """Provide an async httpx client for async HTTP tests."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
