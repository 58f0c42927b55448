"""Backend selection state machine.

A :class:`BackendContext` starts on the reference backend and can be upgraded
to the accelerated backend on request::

    READY_REFERENCE --initialize--> INITIALIZING --ok--> READY_ACCELERATED
                                              \\--error--> FAILED_FALLBACK_REFERENCE
    any state --use_reference()--> READY_REFERENCE

Upgrade requests that arrive while an attempt is in flight await that same
attempt, so the provider is loaded at most once per attempt.  Failures are
returned as :class:`BackendInit` values and never raised.
"""

from __future__ import annotations

import asyncio
import enum
import functools
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .accelerated import load_accelerated_backend
from .backend import Backend
from .config import ENV_FORCE_REFERENCE, BackendSettings
from .errors import ModuleUnavailable
from .reference import ReferenceBackend

LOGGER = logging.getLogger(__name__)

SUPERSEDED_MESSAGE = "accelerated initialization superseded by use_reference()"


class BackendState(enum.Enum):
    READY_REFERENCE = "ready-reference"
    INITIALIZING = "initializing"
    READY_ACCELERATED = "ready-accelerated"
    FAILED_FALLBACK_REFERENCE = "failed-fallback-reference"


@dataclass(frozen=True)
class BackendInit:
    success: bool
    backend: Optional[Backend] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class BackendInfo:
    name: str
    ready: bool
    using_accelerated: bool


class BackendContext:
    """Holds the active backend and serializes upgrade attempts.

    ``loader`` is a zero-argument callable returning an accelerated
    :class:`Backend`; it runs in the event loop's default executor.  It
    defaults to :func:`stridenum.accelerated.load_accelerated_backend` bound to
    ``settings``.
    """

    def __init__(
        self,
        settings: BackendSettings | None = None,
        loader: Callable[[], Backend] | None = None,
    ) -> None:
        self.settings = settings if settings is not None else BackendSettings.from_env()
        if loader is None:
            loader = functools.partial(
                load_accelerated_backend, self.settings.accel_module, self.settings.strict
            )
        self._loader = loader
        self._reference = ReferenceBackend()
        self._backend: Backend = self._reference
        self._state = BackendState.READY_REFERENCE
        self._pending: asyncio.Task | None = None
        self._generation = 0
        self._failure: str | None = None

    def __repr__(self) -> str:
        return "<BackendContext state=%s backend=%s>" % (self._state.value, self._backend.name)

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def state(self) -> BackendState:
        return self._state

    @property
    def last_error(self) -> str | None:
        return self._failure

    def info(self) -> BackendInfo:
        return BackendInfo(
            name=self._backend.name,
            ready=self._backend.is_ready,
            using_accelerated=self._state is BackendState.READY_ACCELERATED,
        )

    async def initialize_accelerated(self) -> BackendInit:
        if self._state is BackendState.READY_ACCELERATED:
            return BackendInit(True, self._backend)
        if self._state is BackendState.FAILED_FALLBACK_REFERENCE:
            return BackendInit(False, error=self._failure)
        loop = asyncio.get_running_loop()
        task = self._pending
        if task is None or task.done() or task.get_loop() is not loop:
            self._generation += 1
            self._state = BackendState.INITIALIZING
            LOGGER.debug("Starting accelerated initialization (attempt %d)", self._generation)
            task = loop.create_task(self._attempt(self._generation))
            self._pending = task
        # Shielded so a caller that times out or is cancelled leaves the shared attempt running.
        return await asyncio.shield(task)

    def initialize_accelerated_sync(self) -> BackendInit:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.initialize_accelerated())
        raise RuntimeError(
            "initialize_accelerated_sync() cannot be called from a running event loop; "
            "await initialize_accelerated() instead"
        )

    async def _attempt(self, generation: int) -> BackendInit:
        try:
            if self.settings.force_reference:
                raise ModuleUnavailable("accelerated backend disabled by %s" % ENV_FORCE_REFERENCE)
            loop = asyncio.get_running_loop()
            backend = await loop.run_in_executor(None, self._loader)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._pending = None
                self._state = BackendState.READY_REFERENCE
            raise
        except Exception as exc:
            return self._commit_failure(generation, exc)
        return self._commit_success(generation, backend)

    def _commit_success(self, generation: int, backend: Backend) -> BackendInit:
        if generation != self._generation:
            LOGGER.debug("Discarding accelerated backend from superseded attempt %d", generation)
            return BackendInit(False, error=SUPERSEDED_MESSAGE)
        self._pending = None
        self._backend = backend
        self._state = BackendState.READY_ACCELERATED
        LOGGER.info("Accelerated backend ready: %r", backend)
        return BackendInit(True, backend)

    def _commit_failure(self, generation: int, exc: Exception) -> BackendInit:
        if generation != self._generation:
            return BackendInit(False, error=SUPERSEDED_MESSAGE)
        message = "%s: %s" % (type(exc).__name__, exc)
        self._pending = None
        self._backend = self._reference
        self._state = BackendState.FAILED_FALLBACK_REFERENCE
        self._failure = message
        LOGGER.warning("Accelerated backend unavailable, staying on reference: %s", message)
        return BackendInit(False, error=message)

    def use_reference(self) -> Backend:
        """Drop back to the reference backend and forget any previous outcome."""

        if self._state is BackendState.INITIALIZING:
            LOGGER.debug("Superseding in-flight accelerated initialization")
        self._generation += 1
        self._pending = None
        self._failure = None
        self._backend = self._reference
        self._state = BackendState.READY_REFERENCE
        return self._reference


_DEFAULT_CONTEXT: BackendContext | None = None


def default_context() -> BackendContext:
    global _DEFAULT_CONTEXT
    if _DEFAULT_CONTEXT is None:
        _DEFAULT_CONTEXT = BackendContext()
    return _DEFAULT_CONTEXT


def set_default_context(ctx: BackendContext | None) -> None:
    """Install ``ctx`` as the process-wide context; ``None`` rebuilds it lazily."""

    global _DEFAULT_CONTEXT
    _DEFAULT_CONTEXT = ctx


def get_backend(ctx: BackendContext | None = None) -> Backend:
    return (ctx or default_context()).backend


async def initialize_accelerated(ctx: BackendContext | None = None) -> BackendInit:
    return await (ctx or default_context()).initialize_accelerated()


def current_backend_info(ctx: BackendContext | None = None) -> BackendInfo:
    return (ctx or default_context()).info()


def use_reference(ctx: BackendContext | None = None) -> Backend:
    return (ctx or default_context()).use_reference()


def create_backend(name: str = "reference", settings: BackendSettings | None = None) -> Backend:
    """Build a standalone backend outside any context.

    ``"accelerated"`` loads the provider synchronously and raises
    :class:`ModuleUnavailable` when it cannot.
    """

    key = (name or "reference").strip().lower()
    if key == "reference":
        return ReferenceBackend()
    if key == "accelerated":
        settings = settings if settings is not None else BackendSettings.from_env()
        if settings.force_reference:
            raise ModuleUnavailable("accelerated backend disabled by %s" % ENV_FORCE_REFERENCE)
        return load_accelerated_backend(settings.accel_module, settings.strict)
    raise ValueError("unknown backend %r; expected 'reference' or 'accelerated'" % name)


__all__ = [
    "BackendContext",
    "BackendInfo",
    "BackendInit",
    "BackendState",
    "create_backend",
    "current_backend_info",
    "default_context",
    "get_backend",
    "initialize_accelerated",
    "set_default_context",
    "use_reference",
]
