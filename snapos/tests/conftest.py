"""
Pytest configuration and shared fixtures for the data core tests.
"""
import os
import tempfile
import threading
import uuid

import pytest

from snapos.app.shop_database import ShopDatabase
from snapos.config.app_config import AppConfig, StoreConfig, SyncConfig
from snapos.mock_api.server import MockSyncServer
from snapos.models.settings import SyncSettings
from snapos.store.local_store import LocalStore
from snapos.sync.engine import SyncEngine
from snapos.sync.outbox import Outbox
from snapos.sync.scheduler import SyncScheduler
from snapos.sync.settings_gate import SettingsGate
from snapos.sync.transport import Transport

ENDPOINT = "http://remote.test/api/sync"


class FakeTransport(Transport):
    """
    Deterministic transport for tests.

    Each delivery pops the next outcome from `outcomes` (True, False or an
    exception instance to raise); when the list runs out `default` is used.
    If `gate` is set, deliveries block until it is set.
    """

    def __init__(self, default=True, outcomes=None, gate=None):
        self.default = default
        self.outcomes = list(outcomes or [])
        self.gate = gate
        self.calls = []
        self.started = threading.Event()

    def deliver(self, batch, settings):
        self.calls.append(list(batch))
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def memory_store():
    """Create a LocalStore with in-memory storage for testing."""
    store = LocalStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def temp_db_path():
    """Temporary file path for a file-based store."""
    temp_path = os.path.join(tempfile.gettempdir(), f"test_store_{uuid.uuid4().hex}.db")

    yield temp_path

    try:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
    except OSError:
        pass


@pytest.fixture
def outbox(memory_store):
    return Outbox(memory_store)


@pytest.fixture
def settings_gate(memory_store):
    return SettingsGate(memory_store)


@pytest.fixture
def sync_enabled(settings_gate):
    """Sync switched on with a configured endpoint."""
    settings = SyncSettings(sync_enabled=True, endpoint_url=ENDPOINT, endpoint_key="test-key")
    settings_gate.save(settings)
    return settings


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def engine(outbox, settings_gate, fake_transport):
    return SyncEngine(outbox, settings_gate, transport=fake_transport)


@pytest.fixture
def scheduler(engine):
    sched = SyncScheduler(engine, interval=0.05)
    yield sched
    sched.stop()


@pytest.fixture
def database(memory_store, outbox, settings_gate, scheduler):
    return ShopDatabase(memory_store, outbox, settings_gate, scheduler)


@pytest.fixture
def test_app_config(temp_db_path, tmp_path):
    """Create a test application configuration."""
    return AppConfig(
        store=StoreConfig(path=temp_db_path),
        sync=SyncConfig(interval=0.05, timeout=2.0),
        log_dir=str(tmp_path / "logs")
    )


@pytest.fixture
def mock_sync_server():
    """Run the mock remote on an ephemeral port."""
    server = MockSyncServer(("127.0.0.1", 0))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


@pytest.fixture
def mock_sync_url(mock_sync_server):
    host, port = mock_sync_server.server_address[:2]
    return f"http://{host}:{port}/api/sync"


@pytest.fixture
def sample_products():
    return [
        {
            "id": "p-1",
            "sku": "SAM-A15",
            "name": "Samsung Galaxy A15",
            "type": "Phone",
            "supplierId": "s-1",
            "costPrice": 520000,
            "sellingPrice": 610000,
            "quantity": 4,
            "reorderLevel": 2,
            "updatedAt": "2024-03-01T09:00:00+00:00",
        },
        {
            "id": "p-2",
            "sku": "USB-C-1M",
            "name": "USB-C Cable 1m",
            "type": "Accessory",
            "supplierId": "s-2",
            "costPrice": 4000,
            "sellingPrice": 10000,
            "quantity": 40,
            "reorderLevel": 10,
            "updatedAt": "2024-03-01T09:00:00+00:00",
        },
    ]
