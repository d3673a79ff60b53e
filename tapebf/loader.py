from __future__ import annotations

import logging
import mmap
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from .errors import EmptyProgram, MemoryMapFailure, SourceNotFound, SourceUnreadable

logger = logging.getLogger(__name__)


@contextmanager
def open_program(path: Union[str, "os.PathLike[str]"]) -> Iterator[mmap.mmap]:
    """Map a program file read-only for the duration of the ``with`` block.

    The mapping is closed when the block exits, whether the program ran to
    completion or an error escaped from it.
    """
    source_path = Path(path)
    name = str(path)
    try:
        handle = source_path.open("rb")
    except FileNotFoundError as exc:
        raise SourceNotFound(name) from exc
    except OSError as exc:
        raise SourceUnreadable(name, exc.strerror) from exc

    with handle:
        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            raise SourceUnreadable(name, exc.strerror) from exc
        if size == 0:
            raise EmptyProgram(name)
        try:
            mapping = mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as exc:
            raise MemoryMapFailure(name, str(exc)) from exc

    logger.debug("mapped %d bytes from %s", size, name)
    try:
        yield mapping
    finally:
        mapping.close()
        logger.debug("released mapping of %s", name)


__all__ = ["open_program"]
