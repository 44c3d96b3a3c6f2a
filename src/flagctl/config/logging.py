from __future__ import annotations

import logging


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Initialise the root logger for CLI use.

    Progress output goes through the event observers; the log stream only
    carries warnings unless ``verbose`` is set.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
