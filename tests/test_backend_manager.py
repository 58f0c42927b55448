from __future__ import annotations

import asyncio
import sys
import threading
import time

import pytest

from stridenum import numpy_kernels
from stridenum.accelerated import AcceleratedBackend, load_accelerated_backend
from stridenum.config import ENV_FORCE_REFERENCE, BackendSettings
from stridenum.errors import ModuleUnavailable
from stridenum.manager import (
    SUPERSEDED_MESSAGE,
    BackendContext,
    BackendInfo,
    BackendState,
    create_backend,
    current_backend_info,
    default_context,
    get_backend,
    initialize_accelerated,
    set_default_context,
    use_reference,
)
from stridenum.reference import ReferenceBackend


class CountingLoader:
    def __init__(self, delay: float = 0.0, error: Exception | None = None, gate: threading.Event | None = None):
        self.calls = 0
        self.delay = delay
        self.error = error
        self.gate = gate

    def __call__(self) -> AcceleratedBackend:
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(timeout=5.0)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return AcceleratedBackend(numpy_kernels, provider="numpy")


def test_context_starts_on_reference():
    ctx = BackendContext(BackendSettings())
    assert ctx.state is BackendState.READY_REFERENCE
    assert ctx.info() == BackendInfo(name="reference", ready=True, using_accelerated=False)
    assert isinstance(ctx.backend, ReferenceBackend)


def test_successful_initialization_switches_backend():
    loader = CountingLoader()
    ctx = BackendContext(BackendSettings(), loader=loader)
    result = asyncio.run(ctx.initialize_accelerated())
    assert result.success
    assert result.error is None
    assert result.backend is ctx.backend
    assert ctx.state is BackendState.READY_ACCELERATED
    assert ctx.info() == BackendInfo(name="accelerated", ready=True, using_accelerated=True)


def test_concurrent_requests_share_one_load():
    loader = CountingLoader(delay=0.05)
    ctx = BackendContext(BackendSettings(), loader=loader)

    async def scenario():
        return await asyncio.gather(*(ctx.initialize_accelerated() for _ in range(5)))

    results = asyncio.run(scenario())
    assert loader.calls == 1
    assert all(result.success for result in results)
    assert len({id(result.backend) for result in results}) == 1


def test_ready_context_returns_immediately():
    loader = CountingLoader()
    ctx = BackendContext(BackendSettings(), loader=loader)
    first = ctx.initialize_accelerated_sync()
    second = ctx.initialize_accelerated_sync()
    assert loader.calls == 1
    assert second.success
    assert second.backend is first.backend


@pytest.mark.parametrize("error", [ModuleUnavailable("no kernels"), RuntimeError("no kernels")])
def test_failure_is_reported_not_raised(error):
    loader = CountingLoader(error=error)
    ctx = BackendContext(BackendSettings(), loader=loader)
    result = ctx.initialize_accelerated_sync()
    assert not result.success
    assert "no kernels" in result.error
    assert result.backend is None
    assert ctx.state is BackendState.FAILED_FALLBACK_REFERENCE
    assert ctx.last_error == result.error
    assert ctx.info().name == "reference"
    assert not ctx.info().using_accelerated


def test_failure_is_remembered_until_use_reference():
    loader = CountingLoader(error=ModuleUnavailable("no kernels"))
    ctx = BackendContext(BackendSettings(), loader=loader)
    ctx.initialize_accelerated_sync()
    again = ctx.initialize_accelerated_sync()
    assert not again.success
    assert loader.calls == 1
    ctx.use_reference()
    assert ctx.state is BackendState.READY_REFERENCE
    loader.error = None
    assert ctx.initialize_accelerated_sync().success
    assert loader.calls == 2


def test_force_reference_skips_the_loader():
    loader = CountingLoader()
    ctx = BackendContext(BackendSettings(force_reference=True), loader=loader)
    result = ctx.initialize_accelerated_sync()
    assert not result.success
    assert ENV_FORCE_REFERENCE in result.error
    assert loader.calls == 0
    assert ctx.state is BackendState.FAILED_FALLBACK_REFERENCE


def test_use_reference_downgrades():
    ctx = BackendContext(BackendSettings(), loader=CountingLoader())
    ctx.initialize_accelerated_sync()
    backend = ctx.use_reference()
    assert isinstance(backend, ReferenceBackend)
    assert ctx.state is BackendState.READY_REFERENCE
    assert get_backend(ctx).name == "reference"


def test_use_reference_supersedes_in_flight_attempt():
    gate = threading.Event()
    loader = CountingLoader(gate=gate)
    ctx = BackendContext(BackendSettings(), loader=loader)

    async def scenario():
        task = asyncio.ensure_future(ctx.initialize_accelerated())
        await asyncio.sleep(0)
        assert ctx.state is BackendState.INITIALIZING
        ctx.use_reference()
        gate.set()
        return await task

    result = asyncio.run(scenario())
    assert not result.success
    assert result.error == SUPERSEDED_MESSAGE
    assert ctx.state is BackendState.READY_REFERENCE
    assert ctx.backend.name == "reference"


def test_timed_out_caller_leaves_shared_attempt_running():
    gate = threading.Event()
    loader = CountingLoader(gate=gate)
    ctx = BackendContext(BackendSettings(), loader=loader)

    async def scenario():
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(ctx.initialize_accelerated(), timeout=0.01)
        gate.set()
        return await ctx.initialize_accelerated()

    result = asyncio.run(scenario())
    assert result.success
    assert loader.calls == 1


def test_sync_initialization_refuses_running_loop():
    ctx = BackendContext(BackendSettings(), loader=CountingLoader())

    async def scenario():
        ctx.initialize_accelerated_sync()

    with pytest.raises(RuntimeError, match="running event loop"):
        asyncio.run(scenario())


def test_module_level_helpers_use_default_context():
    ctx = BackendContext(BackendSettings(), loader=CountingLoader())
    set_default_context(ctx)
    assert default_context() is ctx
    assert current_backend_info() == ctx.info()
    result = asyncio.run(initialize_accelerated())
    assert result.success
    assert get_backend() is ctx.backend
    assert current_backend_info().using_accelerated
    use_reference()
    assert get_backend().name == "reference"


def test_default_context_reads_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(ENV_FORCE_REFERENCE, "1")
    set_default_context(None)
    ctx = default_context()
    assert ctx.settings.force_reference
    assert not ctx.initialize_accelerated_sync().success


def test_create_backend():
    assert isinstance(create_backend(), ReferenceBackend)
    accelerated = create_backend("accelerated", BackendSettings(accel_module="numpy"))
    assert isinstance(accelerated, AcceleratedBackend)
    assert accelerated.provider == "numpy"
    with pytest.raises(ModuleUnavailable):
        create_backend("accelerated", BackendSettings(force_reference=True))
    with pytest.raises(ValueError):
        create_backend("gpu")


def _hide_native(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "stridenum_native", None)
    monkeypatch.delitem(sys.modules, "stridenum.native", raising=False)


def test_missing_extension_is_module_unavailable(monkeypatch: pytest.MonkeyPatch):
    _hide_native(monkeypatch)
    with pytest.raises(ModuleUnavailable, match="cpp"):
        load_accelerated_backend("cpp")
    with pytest.raises(ModuleUnavailable, match="unknown accelerated module"):
        load_accelerated_backend("gpu")


def test_auto_falls_back_to_numpy_provider(monkeypatch: pytest.MonkeyPatch):
    _hide_native(monkeypatch)
    backend = load_accelerated_backend("auto")
    assert backend.provider == "numpy"
    assert not backend.strict
    assert load_accelerated_backend("numpy", strict=True).strict
