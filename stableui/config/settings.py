from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Mapping, MutableMapping

from stableui.core.errors import ConfigError


def _deep_merge(base: MutableMapping[str, Any], overlay: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Deep-merge two mappings.

    - Dicts are merged recursively.
    - Other values are replaced.
    """

    for k, v in overlay.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), Mapping):
            base[k] = _deep_merge(dict(base[k]), v)  # type: ignore[arg-type]
        else:
            base[k] = v
    return base


@dataclass(slots=True)
class ServerSettings:
    """Persisted server settings.

    Only `network.host` and `network.port` are interpreted here. Everything
    else in the document is carried in `raw` and written back untouched.
    """

    host: str = "localhost"
    port: int = 7801
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Any, *, invalid: list[ConfigError] | None = None) -> ServerSettings:
        """Build settings from a decoded YAML document.

        A known value that fails validation keeps its default and is reported
        through `invalid`; the rest of the document is still carried in `raw`.

        Raises:
            ConfigError: If the document is not a mapping.
        """

        if doc is None:
            return cls()
        if not isinstance(doc, Mapping):
            raise ConfigError("Top-level settings document must be a mapping")

        errors = invalid if invalid is not None else []
        settings = cls(raw=copy.deepcopy(dict(doc)))
        network = doc.get("network")
        if network is None:
            return settings
        if not isinstance(network, Mapping):
            errors.append(ConfigError("must be a mapping", path="network"))
            return settings

        if "host" in network:
            host = network["host"]
            if not isinstance(host, str) or not host.strip():
                errors.append(ConfigError("must be a non-empty string", path="network.host"))
            else:
                settings.host = host

        if "port" in network:
            port = network["port"]
            if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
                errors.append(ConfigError("must be an integer in 1..65535", path="network.port"))
            else:
                settings.port = port

        return settings

    def to_document(self) -> dict[str, Any]:
        """Serialize back to a document, preserving unrecognized keys."""

        doc = copy.deepcopy(self.raw)
        return dict(_deep_merge(doc, {"network": {"host": self.host, "port": self.port}}))
