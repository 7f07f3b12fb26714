"""Event log for ensim's structural changes and simulation runs.

Each ensim module that reports events holds a module-level logger named
after its place in the package ("sim.simulator", "model.ensemble", ...).
Messages go to stdout, and optionally to a second stream such as an open
run-log file, each under a header with the "ensim:" prefix, the level and
the wall-clock time. Simulator binds, run start and end, probe changes,
termination changes and network edits are INFO; simulation failures are
ERROR. The per-step inner loops stay silent unless the threshold is
lowered to DEBUG.

Usage:
    from ensim.utils import get_logger
    LOG = get_logger("model.network")
    LOG.info("Network '%s': added node '%s'", "net", "input")
"""

import sys
from datetime import datetime


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
RULE = "_" * 72


def get_logger(name, out=None, level="INFO"):
    """Logger for the ensim module ``name``.

    Parameters
    ----------
    name : str
        Dotted module path below ``ensim``, shown in every header.
    out : file-like, optional
        Second destination, e.g. an open run-log file.
    level : str
        Lowest level printed, one of LEVELS.

    Returns
    -------
    callable
        ``log(level, msg, args)`` with .debug, .info, .warning, .error
        shortcuts taking ``%``-style arguments.
    """
    prefix = f"ensim:{name}"
    destinations = [sys.stdout] + ([out] if out else [])
    threshold = LEVELS.index(level)

    def log(level, msg, args):
        if LEVELS.index(level) < threshold:
            return
        try:
            text = msg % args
        except TypeError:
            text = msg
        stamp = datetime.now().strftime("%H:%M:%S")
        for dest in destinations:
            print(RULE, file=dest)
            print(f"{prefix} {level} [{stamp}]", file=dest)
            print(text, file=dest)

    log.debug = lambda msg, *args: log("DEBUG", msg, args)
    log.info = lambda msg, *args: log("INFO", msg, args)
    log.warning = lambda msg, *args: log("WARNING", msg, args)
    log.error = lambda msg, *args: log("ERROR", msg, args)

    return log
