"""Network service layer."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from stableui.config.resolver import RuntimeConfig
from stableui.runtime.cancellation import CancellationSignal


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    return FastAPI(title="StableUI")


class WebServer:
    """Runs the FastAPI app under uvicorn until told to exit."""

    def __init__(self, app: FastAPI, config: RuntimeConfig, cancel: CancellationSignal) -> None:
        self.app = app
        self.config = config
        self.cancel = cancel
        self._server: uvicorn.Server | None = None

    def _request_exit(self) -> None:
        if self._server is not None:
            self._server.should_exit = True

    def launch(self) -> None:
        """Serve until the server exits (signal, or the cancellation signal firing)."""

        uv_config = uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.uvicorn_name,
            log_config=None,
        )
        self._server = uvicorn.Server(uv_config)
        self.cancel.add_callback(self._request_exit)

        logger.info("server_launching", extra={"bind_url": self.config.bind_url})
        for route in self.app.routes:
            methods = getattr(route, "methods", None)
            path = getattr(route, "path", None)
            if methods is None or path is None:
                continue
            logger.debug("route", extra={"methods": sorted(methods), "path": path})

        self._server.run()
        logger.info("server_stopped")
