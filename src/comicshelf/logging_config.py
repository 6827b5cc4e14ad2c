"""Central logging configuration. Stdlib logging only."""
from __future__ import annotations

import logging
import sys
from typing import Optional, Union

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


# PUBLIC_INTERFACE
def setup_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Configure the `comicshelf` logger hierarchy with a single stdout handler.

    Safe to call more than once; the handler is only installed the first time.
    """
    lvl = level if level is not None else "INFO"
    if isinstance(lvl, str):
        lvl = getattr(logging, lvl.upper(), logging.INFO)

    root = logging.getLogger("comicshelf")
    root.setLevel(lvl)
    if not any(getattr(h, "_comicshelf", False) for h in root.handlers):
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%H:%M:%S"))
        handler._comicshelf = True  # type: ignore[attr-defined]
        root.addHandler(handler)
