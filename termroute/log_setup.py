from __future__ import annotations

import logging
import os
from datetime import datetime

# Below DEBUG: one record per enumeration call and per parsed line.
TRACE = 5
TRACE_DIR = "debug"
PACKAGE_LOGGER = "termroute"

logging.addLevelName(TRACE, "TRACE")

_CONSOLE_FMT = "%(levelname)s %(name)s: %(message)s"
_FILE_FMT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s:%(funcName)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _console_level(debug: bool, trace: bool, verbose: bool) -> int:
    if trace and verbose:
        return TRACE
    if debug or trace:
        return logging.DEBUG
    return logging.INFO


def setup_logging(
    *, debug: bool, trace: bool, verbose: bool, trace_dir: str | None = None
) -> logging.Logger:
    """Configure the package logger so every termroute.* module inherits it.

    Args:
        debug: Lower the console threshold to DEBUG.
        trace: Also write every record, TRACE included, to a timestamped
            file under ``trace_dir``.
        verbose: With trace, send TRACE records to the console too.
        trace_dir: Directory for trace files. Defaults to TRACE_DIR.

    Returns:
        The configured package logger.
    """
    root = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(TRACE)

    console = logging.StreamHandler()
    console.setLevel(_console_level(debug, trace, verbose))
    console.setFormatter(logging.Formatter(_CONSOLE_FMT))
    root.addHandler(console)

    if trace:
        directory = trace_dir or TRACE_DIR
        os.makedirs(directory, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
        fh = logging.FileHandler(os.path.join(directory, f"trace-{timestamp}.log"))
        fh.setLevel(TRACE)
        fh.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
        root.addHandler(fh)

    return root
