from __future__ import annotations

import logging
import sys

_FORMAT = "stylepipe: %(message)s"
_VERBOSE_FORMAT = "stylepipe [%(levelname)s] %(name)s: %(message)s"


def log_level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(*, verbose: bool, quiet: bool) -> None:
    """
    Route stylepipe's log records to stderr.

    Reporter output (console text, JSON, annotations) owns stdout, so the two
    never interleave. `--verbose` adds the level and logger name to each line.
    """

    logging.basicConfig(
        level=log_level(verbose=verbose, quiet=quiet),
        format=_VERBOSE_FORMAT if verbose else _FORMAT,
        stream=sys.stderr,
        force=True,
    )
