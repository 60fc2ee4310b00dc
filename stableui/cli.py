from __future__ import annotations

import logging
import sys
from typing import Sequence

from stableui.observability.logging import configure_logging
from stableui.runtime.lifecycle import LifecycleCoordinator, install_shutdown_triggers


logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint referenced by pyproject.toml.

    Exit codes: 0 after a normal shutdown, 2 for invalid command line input,
    1 for anything unexpected.
    """

    argv_list = list(argv) if argv is not None else sys.argv[1:]

    configure_logging(level="INFO")
    logger.info("starting", extra={"argv": argv_list})

    coordinator = LifecycleCoordinator(argv_list)
    install_shutdown_triggers(coordinator)
    try:
        code = coordinator.run()
    except Exception as e:  # noqa: BLE001
        logger.exception("fatal_error")
        sys.stderr.write(f"Fatal error: {e}\n")
        coordinator.request_shutdown("fatal_error")
        return 1

    if code == 2:
        sys.stderr.write("Command line arguments given are invalid; see log for details.\n")
    return code
