from __future__ import annotations

from stableui.webapi.basic_api import register_basic_api
from stableui.webapi.server import WebServer, create_app

__all__ = ["WebServer", "create_app", "register_basic_api"]
