"""Process lifecycle: ordered startup and exactly-once shutdown.

Startup order: parse flags, pick the settings file, load it, resolve the
runtime config, re-save settings (unless locked), export environment
variables, start backends, start sessions, register the API, warn about
unused flags, then block in the service layer.

Shutdown may be requested from any thread, any number of times. The first
request fires the cancellation signal and stops backends, then sessions.
"""

from __future__ import annotations

import atexit
import enum
import logging
import signal
import threading
from dataclasses import dataclass
from typing import Any, Callable, MutableMapping, Sequence

from fastapi import FastAPI

from stableui.accounts.sessions import SessionHandler
from stableui.backends.handler import BackendHandler
from stableui.config.resolver import ConfigResolver, RuntimeConfig, apply_environment
from stableui.config.store import DEFAULT_SETTINGS_PATH, SettingsStore
from stableui.core.errors import StableUIError
from stableui.core.flags import FlagTable, parse_command_line
from stableui.core.result import Failure, Result
from stableui.runtime.cancellation import CancellationSignal
from stableui.runtime.shutdown import ShutdownGuard
from stableui.webapi.basic_api import register_basic_api
from stableui.webapi.server import WebServer, create_app


logger = logging.getLogger(__name__)


class LifecycleState(str, enum.Enum):
    IDLE = "idle"
    PARSING_ARGS = "parsing_args"
    LOADING_SETTINGS = "loading_settings"
    APPLYING_CONFIG = "applying_config"
    STARTING_SUBSYSTEMS = "starting_subsystems"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


_STATE_ORDER = {state: i for i, state in enumerate(LifecycleState)}


@dataclass(slots=True)
class BootstrapContext:
    """Everything the process owns, built once by the entry routine."""

    cancel: CancellationSignal
    flags: FlagTable | None = None
    store: SettingsStore | None = None
    config: RuntimeConfig | None = None
    backends: BackendHandler | None = None
    sessions: SessionHandler | None = None


class LifecycleCoordinator:
    def __init__(
        self,
        args: Sequence[str],
        *,
        environ: MutableMapping[str, str] | None = None,
        backend_factory: Callable[..., BackendHandler] = BackendHandler,
        session_factory: Callable[..., SessionHandler] = SessionHandler,
        app_factory: Callable[[], FastAPI] = create_app,
        server_factory: Callable[..., Any] = WebServer,
    ) -> None:
        self.args = list(args)
        self.ctx = BootstrapContext(cancel=CancellationSignal())
        self.guard = ShutdownGuard()
        self.server: Any = None
        self._environ = environ
        self._backend_factory = backend_factory
        self._session_factory = session_factory
        self._app_factory = app_factory
        self._server_factory = server_factory
        self._state = LifecycleState.IDLE
        self._state_lock = threading.Lock()
        # Held while subsystems start; shutdown waits on it before cancelling.
        self._startup_lock = threading.RLock()

    @property
    def state(self) -> LifecycleState:
        return self._state

    def _transition(self, new: LifecycleState) -> bool:
        with self._state_lock:
            if _STATE_ORDER[new] <= _STATE_ORDER[self._state]:
                return False
            old, self._state = self._state, new
        logger.info("lifecycle_state", extra={"from": old.value, "to": new.value})
        return True

    def _abort(self, failure: Failure) -> None:
        logger.error(
            "invalid_command_line",
            extra={"reason": failure.reason.value, "subject": failure.subject, "error": failure.message},
        )
        self._transition(LifecycleState.STOPPED)

    def bootstrap(self) -> Result[RuntimeConfig]:
        """Parse, load, resolve and apply. Starts nothing."""

        self._transition(LifecycleState.PARSING_ARGS)
        parsed = parse_command_line(self.args)
        if not parsed.ok:
            self._abort(parsed.failure)  # type: ignore[arg-type]
            return Result.fail(parsed.failure)  # type: ignore[arg-type]
        flags = parsed.unwrap()
        self.ctx.flags = flags

        self._transition(LifecycleState.LOADING_SETTINGS)
        store = SettingsStore(flags.get("settings_file", DEFAULT_SETTINGS_PATH))
        store.load()
        self.ctx.store = store

        self._transition(LifecycleState.APPLYING_CONFIG)
        resolved = ConfigResolver(flags, store.settings).resolve()
        if not resolved.ok:
            self._abort(resolved.failure)  # type: ignore[arg-type]
            return resolved
        config = resolved.unwrap()
        self.ctx.config = config

        # Under the startup lock so a concurrent shutdown either precedes this
        # block entirely or waits for it.
        with self._startup_lock:
            if self.ctx.cancel.cancelled:
                logger.info("bootstrap_cancelled", extra={"path": str(store.path)})
                return resolved

            if config.settings_locked:
                store.lock()
            else:
                logger.info("settings_resaving", extra={"path": str(store.path)})
                store.save()

            apply_environment(config, self._environ)
        logger.info(
            "config_resolved",
            extra={
                "environment": config.environment.value,
                "bind_url": config.bind_url,
                "log_level": config.log_level.value,
                "settings_locked": config.settings_locked,
            },
        )
        return resolved

    def start_subsystems(self) -> bool:
        """Start backends, sessions and the API. Returns False if shutdown got there first."""

        ctx = self.ctx
        if ctx.config is None or ctx.flags is None:
            raise StableUIError("bootstrap() must succeed before subsystems can start")

        with self._startup_lock:
            if ctx.cancel.cancelled or not self._transition(LifecycleState.STARTING_SUBSYSTEMS):
                logger.info("startup_cancelled", extra={"state": self._state.value})
                return False

            logger.info("backends_loading")
            ctx.backends = self._backend_factory(ctx.cancel)
            ctx.backends.load()

            logger.info("sessions_loading")
            ctx.sessions = self._session_factory(ctx.cancel, local_user_id=ctx.config.local_user_id)

            logger.info("api_registering")
            app = self._app_factory()
            register_basic_api(app, ctx, self.request_shutdown)
            self.server = self._server_factory(app, ctx.config, ctx.cancel)

        for key in ctx.flags.unused_keys():
            logger.warning("unused_flag", extra={"flag": key})
        return True

    def serve(self) -> None:
        """Block in the service layer, then make sure shutdown has completed."""

        try:
            if self._transition(LifecycleState.RUNNING) and not self.ctx.cancel.cancelled:
                self.server.launch()
        finally:
            self.request_shutdown("server_stopped")
            self.guard.wait()

    def run(self) -> int:
        """Full lifecycle. Returns 0 after shutdown, 2 on invalid command line input."""

        if not self.bootstrap().ok:
            return 2
        if self.start_subsystems():
            self.serve()
        else:
            self.guard.wait()
        return 0

    def request_shutdown(self, reason: str = "requested") -> bool:
        """Run the shutdown sequence once. Returns True only for the caller that ran it."""

        return self.guard.run_once(lambda: self._shutdown_sequence(reason))

    def _shutdown_sequence(self, reason: str) -> None:
        with self._startup_lock:
            self._transition(LifecycleState.SHUTTING_DOWN)
            logger.info("shutdown_started", extra={"reason": reason})
            self.ctx.cancel.cancel()

            for name, subsystem in (("backends", self.ctx.backends), ("sessions", self.ctx.sessions)):
                if subsystem is None:
                    continue
                try:
                    subsystem.shutdown()
                except Exception:  # noqa: BLE001
                    logger.exception("subsystem_stop_failed", extra={"subsystem": name})

            self._transition(LifecycleState.STOPPED)
            logger.info("shutdown_complete", extra={"reason": reason})


def install_shutdown_triggers(coordinator: LifecycleCoordinator) -> None:
    """Route process exit, SIGINT and SIGTERM into `request_shutdown`.

    Signal handlers hand off to a thread: the handler runs on the main thread,
    which may be inside startup holding the startup lock.
    """

    atexit.register(coordinator.request_shutdown, "process_exit")

    def _on_signal(signum: int, _frame: Any) -> None:
        reason = signal.Signals(signum).name.lower()
        threading.Thread(
            target=coordinator.request_shutdown,
            args=(reason,),
            name="shutdown-trigger",
            daemon=True,
        ).start()

    if threading.current_thread() is not threading.main_thread():
        logger.warning("signal_triggers_skipped", extra={"thread_name": threading.current_thread().name})
        return
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _on_signal)
