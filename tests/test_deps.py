# =============================================================================
# Unit Tests — Dependencies & Startup
# =============================================================================
#
# Session dependency, store selection by settings, and the memory-store
# seed check run by the app lifespan. No database is contacted: sessions
# are AsyncMocks.
# =============================================================================

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_memory_store, get_record_store
from app.db.engine import get_async_session
from app.db.models import PersonalData
from app.main import app, lifespan
from app.services.record_store import InMemoryRecordStore, SqlRecordStore
from tests.conftest import run


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "personal_data.json"
    path.write_text(json.dumps([
        {"id": 1, "first_name": "Jane", "last_name": "Doe", "email": "jane@x.io",
         "gender": "Female", "ip_address": "1.2.3.4"},
    ]))
    return path


@pytest.fixture(autouse=True)
def fresh_memory_store():
    get_memory_store.cache_clear()
    yield
    get_memory_store.cache_clear()


def _settings(store_type: str, seed_path="unused.json") -> MagicMock:
    mock_settings = MagicMock()
    mock_settings.record_store_type = store_type
    mock_settings.records_seed_path = str(seed_path)
    return mock_settings


class TestGetAsyncSession:
    """Per-request session lifecycle."""

    def _factory(self, session) -> MagicMock:
        factory = MagicMock()
        factory.return_value.__aenter__.return_value = session
        return factory

    def test_yields_session_and_closes_without_commit(self):
        session = AsyncMock()

        async def scenario():
            agen = get_async_session()
            yielded = await agen.__anext__()
            await agen.aclose()
            return yielded

        factory = self._factory(session)
        with patch("app.db.engine.async_session_factory", factory):
            assert run(scenario()) is session

        factory.return_value.__aexit__.assert_awaited_once()
        session.commit.assert_not_awaited()
        session.rollback.assert_not_awaited()

    def test_rolls_back_and_reraises(self):
        session = AsyncMock()

        async def scenario():
            agen = get_async_session()
            await agen.__anext__()
            await agen.athrow(RuntimeError("statement timeout"))

        with patch("app.db.engine.async_session_factory", self._factory(session)):
            with pytest.raises(RuntimeError, match="statement timeout"):
                run(scenario())

        session.rollback.assert_awaited_once()


class TestGetRecordStore:
    """Backend selection by settings.record_store_type."""

    def _first(self, session):
        async def scenario():
            agen = get_record_store(session=session)
            store = await agen.__anext__()
            await agen.aclose()
            return store

        return run(scenario())

    def test_sql_wraps_request_session(self):
        session = AsyncMock()
        with patch("app.api.deps.settings", _settings("sql")):
            store = self._first(session)

        assert isinstance(store, SqlRecordStore)
        assert store._session is session

    def test_memory_is_shared_and_ignores_session(self, seed_file):
        session = AsyncMock()
        with patch("app.api.deps.settings", _settings("memory", seed_file)):
            first = self._first(session)
            second = self._first(session)

        assert isinstance(first, InMemoryRecordStore)
        assert first is second
        assert len(first) == 1
        session.execute.assert_not_awaited()

    def test_route_uses_session_dependency(self):
        session = AsyncMock()
        session.get.return_value = None
        app.dependency_overrides[get_async_session] = lambda: session
        try:
            with patch("app.api.deps.settings", _settings("sql")):
                resp = TestClient(app).get("/records/1")
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 404
        session.get.assert_awaited_once_with(PersonalData, 1)


class TestLifespan:
    """Startup check for the memory store seed file."""

    def _start(self):
        async def scenario():
            async with lifespan(app):
                pass

        run(scenario())

    def test_missing_seed_file_fails_startup(self, tmp_path):
        mock_settings = _settings("memory", tmp_path / "missing.json")
        with patch("app.main.settings", mock_settings), \
                patch("app.api.deps.settings", mock_settings), \
                patch("app.main.async_engine") as mock_engine:
            mock_engine.dispose = AsyncMock()
            with pytest.raises(FileNotFoundError):
                self._start()

        mock_engine.dispose.assert_not_awaited()

    def test_seed_file_loaded_at_startup(self, seed_file):
        mock_settings = _settings("memory", seed_file)
        with patch("app.main.settings", mock_settings), \
                patch("app.api.deps.settings", mock_settings), \
                patch("app.main.async_engine") as mock_engine:
            mock_engine.dispose = AsyncMock()
            self._start()

        assert get_memory_store.cache_info().currsize == 1
        mock_engine.dispose.assert_awaited_once()

    def test_sql_store_skips_seed_file(self):
        mock_settings = _settings("sql")
        with patch("app.main.settings", mock_settings), \
                patch("app.main.async_engine") as mock_engine:
            mock_engine.dispose = AsyncMock()
            self._start()

        assert get_memory_store.cache_info().currsize == 0
