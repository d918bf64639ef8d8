import time
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError, CircuitState
from app.core.telemetry import UNINSTRUMENTED_PATHS, setup_telemetry
from app.core.window_store import InMemoryWindowStore
from fastapi import FastAPI


async def _boom():
    raise RuntimeError("store down")


async def _open(cb: CircuitBreaker) -> None:
    with pytest.raises(RuntimeError):
        await cb.call(_boom)


class TestCircuitBreaker:
    def test_initial_state(self):
        cb = CircuitBreaker("test", failure_threshold=2)
        assert cb.state == CircuitState.CLOSED
        assert cb.name == "test"
        assert cb.failure_count == 0

    @pytest.mark.asyncio
    async def test_successful_call(self):
        cb = CircuitBreaker("test")
        mock_func = AsyncMock(return_value="success")

        result = await cb.call(mock_func)

        assert result == "success"
        assert cb.state == CircuitState.CLOSED
        mock_func.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_call_opens_after_threshold(self):
        cb = CircuitBreaker("test", failure_threshold=2)
        mock_func = AsyncMock(side_effect=Exception("Error"))

        # 1st failure
        with pytest.raises(Exception):
            await cb.call(mock_func)
        assert cb.state == CircuitState.CLOSED

        # 2nd failure -> Open
        with pytest.raises(Exception):
            await cb.call(mock_func)
        assert cb.failure_count == 2
        assert cb.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_open_circuit_raises_error_no_fallback(self):
        cb = CircuitBreaker("test", failure_threshold=1)
        await _open(cb)

        never_called = AsyncMock(return_value="should not run")
        with pytest.raises(CircuitBreakerOpenError):
            await cb.call(never_called)
        never_called.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fallback_usage(self):
        cb = CircuitBreaker("test", failure_threshold=1, recovery_timeout_sec=1)
        mock_func = AsyncMock(side_effect=Exception("Error"))
        mock_fallback = MagicMock(return_value=[])

        # Error with fallback -> fallback result, failure still counted
        res = await cb.call(mock_func, fallback=mock_fallback)
        assert res == []
        assert cb.failure_count == 1
        assert cb.state == CircuitState.OPEN

        # Open -> fallback without awaiting func
        res2 = await cb.call(AsyncMock(return_value="success"), fallback=mock_fallback)
        assert res2 == []
        assert mock_fallback.call_count == 2

    @pytest.mark.asyncio
    async def test_recovery_half_open(self):
        cb = CircuitBreaker("test", failure_threshold=1, recovery_timeout_sec=0.1)
        await _open(cb)

        time.sleep(0.15)

        res = await cb.call(AsyncMock(return_value="recovered"))
        assert res == "recovered"
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0

    @pytest.mark.asyncio
    async def test_failed_probe_reopens(self):
        cb = CircuitBreaker("test", failure_threshold=3, recovery_timeout_sec=0.1)
        for _ in range(3):
            await _open(cb)
        assert cb.state == CircuitState.OPEN

        time.sleep(0.15)
        await _open(cb)

        assert cb.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_manual_reset(self):
        cb = CircuitBreaker("test", failure_threshold=1)
        await _open(cb)
        assert cb.state == CircuitState.OPEN

        cb.reset()
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0


class TestTelemetry:
    @patch("app.core.telemetry.get_settings")
    @patch("app.core.telemetry.Instrumentator")
    def test_setup_telemetry_prometheus_enabled(self, mock_instrumentator, mock_get_settings):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = True
        mock_settings.ENABLE_OTEL = False
        mock_get_settings.return_value = mock_settings

        app = FastAPI()
        setup_telemetry(app)

        mock_instrumentator.assert_called_once()
        assert mock_instrumentator.call_args.kwargs["excluded_handlers"] == UNINSTRUMENTED_PATHS
        mock_instrumentator.return_value.instrument.assert_called_once_with(app)

    @patch("app.core.telemetry.get_settings")
    @patch("app.core.telemetry.OTLPSpanExporter")
    @patch("app.core.telemetry.BatchSpanProcessor")
    @patch("app.core.telemetry.FastAPIInstrumentor")
    def test_setup_telemetry_otel_enabled(
        self, mock_fastapi_instr, mock_processor, mock_exporter, mock_get_settings
    ):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = False
        mock_settings.ENABLE_OTEL = True
        mock_settings.APP_NAME = "test"
        mock_settings.APP_VERSION = "1.0"
        mock_settings.DEBUG = False
        mock_get_settings.return_value = mock_settings

        app = FastAPI()
        setup_telemetry(app)

        mock_fastapi_instr.instrument_app.assert_called_once()
        assert "/health" in mock_fastapi_instr.instrument_app.call_args.kwargs["excluded_urls"]
        mock_processor.assert_called_once()

    @patch("app.core.telemetry.get_settings")
    @patch("app.core.telemetry.Instrumentator")
    @patch("app.core.telemetry.FastAPIInstrumentor")
    def test_setup_telemetry_all_disabled(
        self, mock_fastapi_instr, mock_instrumentator, mock_get_settings
    ):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = False
        mock_settings.ENABLE_OTEL = False
        mock_get_settings.return_value = mock_settings

        setup_telemetry(FastAPI())

        mock_instrumentator.assert_not_called()
        mock_fastapi_instr.instrument_app.assert_not_called()


class TestInMemoryWindowStore:
    def test_get_set(self):
        store = InMemoryWindowStore()
        store.set("alice", [1, 2, 3])
        assert store.get("alice") == [1, 2, 3]
        assert store.get("missing") == []

    def test_get_returns_copy(self):
        store = InMemoryWindowStore()
        store.set("alice", [1])

        store.get("alice").append(2)

        assert store.get("alice") == [1]

    def test_no_ttl_never_expires(self):
        store = InMemoryWindowStore()
        store.set("alice", [1])

        time.sleep(0.05)

        assert store.get("alice") == [1]
        assert store.cleanup_expired() == 0

    def test_idle_expiration(self):
        store = InMemoryWindowStore(idle_ttl_seconds=0.1)
        store.set("alice", [1])
        assert store.get("alice") == [1]

        time.sleep(0.15)

        assert store.get("alice") == []
        assert store.size() == 0

    def test_set_refreshes_idle_timer(self):
        store = InMemoryWindowStore(idle_ttl_seconds=0.2)
        store.set("alice", [1])
        time.sleep(0.12)
        store.set("alice", [1, 2])
        time.sleep(0.12)

        assert store.get("alice") == [1, 2]

    def test_delete_clear(self):
        store = InMemoryWindowStore()
        store.set("alice", [1])
        store.set("bob", [2])

        assert store.delete("alice") is True
        assert store.get("alice") == []
        assert store.delete("missing") is False

        store.clear()
        assert store.size() == 0
        assert store.get("bob") == []

    def test_cleanup_expired(self):
        store = InMemoryWindowStore(idle_ttl_seconds=0.2)
        store.set("alice", [1])
        time.sleep(0.12)
        store.set("bob", [2])
        time.sleep(0.12)

        removed = store.cleanup_expired()
        assert removed == 1
        assert store.get("alice") == []
        assert store.get("bob") == [2]

    def test_size_ignores_idle_identities(self):
        store = InMemoryWindowStore(idle_ttl_seconds=0.2)
        store.set("alice", [1])
        time.sleep(0.12)
        store.set("bob", [2])
        time.sleep(0.12)

        assert store.size() == 1

    def test_writes_sweep_identities_that_never_return(self):
        store = InMemoryWindowStore(idle_ttl_seconds=0.05)
        for n in range(200):
            store.set(f"one-off-{n}", [n])

        time.sleep(0.1)
        store.set("steady", [1])

        # Swept from the dict itself, not just hidden from size()
        assert store.cleanup_expired() == 0
        assert store.size() == 1
