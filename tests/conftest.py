from __future__ import annotations

import numpy as _np
import pytest

from stridenum.config import ENV_ACCEL_MODULE, ENV_FORCE_REFERENCE, ENV_STRICT, BackendSettings
from stridenum.manager import BackendContext, set_default_context


@pytest.fixture(autouse=True)
def _isolated_backend_state(monkeypatch: pytest.MonkeyPatch):
    for name in (ENV_ACCEL_MODULE, ENV_FORCE_REFERENCE, ENV_STRICT):
        monkeypatch.delenv(name, raising=False)
    set_default_context(None)
    yield
    set_default_context(None)


@pytest.fixture
def rng() -> _np.random.Generator:
    return _np.random.default_rng(20240611)


@pytest.fixture
def reference_ctx() -> BackendContext:
    return BackendContext(BackendSettings(accel_module="numpy"))


@pytest.fixture
def accelerated_ctx() -> BackendContext:
    ctx = BackendContext(BackendSettings(accel_module="numpy", strict=False))
    result = ctx.initialize_accelerated_sync()
    assert result.success, result.error
    return ctx


@pytest.fixture(params=["reference_ctx", "accelerated_ctx"])
def ctx(request: pytest.FixtureRequest) -> BackendContext:
    return request.getfixturevalue(request.param)
