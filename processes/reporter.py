"""Structured reporting for advisories and fatal errors.

A single :class:`Reporter` is created at process entry and handed to each
component. Warnings never halt execution; ``fatal`` writes the full cause
chain of an exception and leaves the exit decision to the caller.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _level_for(debug: int, verbose: bool) -> int:
    if debug > 0:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


class Reporter:
    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @classmethod
    def configure(
        cls,
        *,
        debug: int = 0,
        verbose: bool = False,
        stream: IO[str] | None = None,
        name: str = "beacon",
    ) -> Reporter:
        """Attach a stderr handler to the ``beacon`` logger and return a reporter."""
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, "%Y-%m-%dT%H:%M:%S"))
        logger.addHandler(handler)
        logger.setLevel(_level_for(debug, verbose))
        return cls(logger)

    @classmethod
    def quiet(cls) -> Reporter:
        """Reporter for library use: records go through normal logging propagation."""
        return cls(logging.getLogger("beacon"))

    def child(self, suffix: str) -> Reporter:
        return Reporter(self._logger.getChild(suffix))

    def debug(self, msg: str, *args: object) -> None:
        self._logger.debug(msg, *args)

    def info(self, msg: str, *args: object) -> None:
        self._logger.info(msg, *args)

    def warn(self, msg: str, *args: object) -> None:
        self._logger.warning(msg, *args)

    def fatal(self, exc: BaseException) -> None:
        chain: list[str] = []
        cur: BaseException | None = exc
        while cur is not None:
            chain.append(f"{type(cur).__name__}: {cur}")
            cur = cur.__cause__
        self._logger.critical(" <- caused by ".join(chain))
