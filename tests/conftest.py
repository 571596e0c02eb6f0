import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dashboard.services.history_client import HistoryClient
from tests.helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_history():
    """Reset the fake backend's module state around each test."""
    from tests.mocks import fake_history as fake

    fake.reset()
    yield fake
    fake.reset()


@pytest_asyncio.fixture
async def history_client(fake_history):
    """HistoryClient wired to the fake backend via in-process ASGITransport."""
    transport = ASGITransport(app=fake_history.app)
    http_client = AsyncClient(transport=transport, base_url="http://fake-history")
    client = HistoryClient(base_url="http://fake-history", http_client=http_client)
    yield client
    await client.close()


@pytest_asyncio.fixture
async def dashboard_app(history_client, clock, tmp_path):
    """Dashboard app with its state wired to the fake backend and a temp preferences file."""
    from dashboard.main import app
    from dashboard.schemas.status import WindowSelection
    from dashboard.services.preferences import PreferenceStore
    from dashboard.services.refresh import RefreshController

    controller = RefreshController(
        history_client,
        page_size=10,
        window=WindowSelection(preset_hours=24),
        clock=clock,
    )
    app.state.refresh_controller = controller
    app.state.preferences = PreferenceStore(tmp_path / "preferences.json")

    yield app

    await controller.close()


@pytest_asyncio.fixture
async def client(dashboard_app):
    """Async HTTP client against the dashboard app."""
    transport = ASGITransport(app=dashboard_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
