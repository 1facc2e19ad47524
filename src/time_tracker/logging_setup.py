from __future__ import annotations

import logging
import sys

_HANDLER_NAME = "time_tracker.console"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow every time_tracker log at the configured level
    - show third-party logs only at WARNING+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("time_tracker"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Attach one console handler to the root logger and set the app log level.

    Safe to call repeatedly (each app instance calls it); handlers installed
    by the server or by the test runner are left in place.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.getLogger("time_tracker").setLevel(level)

    root = logging.getLogger()
    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ch = logging.StreamHandler(sys.stderr)
    ch.set_name(_HANDLER_NAME)
    ch.setLevel(logging.DEBUG)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)
    if root.level > level:
        root.setLevel(level)
