"""API test infrastructure -- async httpx client against the ASGI app."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pvengine.catalog import EquipmentCatalog

from app.services.catalog_service import get_catalog


# ---------------------------------------------------------------------------
# FastAPI app with the built-in catalog injected
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def app():
    from app.main import create_app

    application = create_app()
    application.dependency_overrides[get_catalog] = EquipmentCatalog.default

    yield application

    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

@pytest.fixture
def project_body() -> dict:
    """Lisbon reference system: 10 x 400 W on one 3 kW inverter."""
    return {
        "name": "lisbon",
        "latitude": 38.72,
        "longitude": -9.14,
        "roof_segments": [
            {"name": "south", "tilt": 30, "azimuth": 0, "panels_count": 10, "row_spacing": 1.7},
        ],
        "system_config": {
            "panel_id": "p-trina-vertex-400",
            "inverter_id": "i-huawei-3ktl-l1",
            "inverter_count": 1,
        },
        "load_profile": {"annual_kwh": 6500, "base_kw": 0.3, "peak_kw": 2.5},
        "seed": 42,
    }
