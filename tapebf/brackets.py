from __future__ import annotations

import logging
import mmap
from typing import Dict, Iterator, List, Tuple, Union

from .errors import UnmatchedCloseBracket, UnmatchedOpenBracket

logger = logging.getLogger(__name__)

LOOP_OPEN = ord("[")
LOOP_CLOSE = ord("]")

Program = Union[bytes, bytearray, mmap.mmap]


def as_program(code: Union[str, Program]) -> Program:
    """Return ``code`` as an indexable byte sequence.

    Text is encoded as UTF-8, so reported positions are byte offsets.
    """
    if isinstance(code, str):
        return code.encode("utf-8")
    return code


def _match_pairs(program: Program) -> Iterator[Tuple[int, int]]:
    # Iterating an mmap yields 1-byte ``bytes``; indexing yields ints.
    stack: List[int] = []
    for index in range(len(program)):
        byte = program[index]
        if byte == LOOP_OPEN:
            stack.append(index)
        elif byte == LOOP_CLOSE:
            if not stack:
                raise UnmatchedCloseBracket(index)
            yield stack.pop(), index
    if stack:
        raise UnmatchedOpenBracket(stack[-1])


def validate(program: Program) -> None:
    """Check that every '[' has a matching ']' and vice versa.

    Raises :class:`UnmatchedCloseBracket` at the first ']' with no pending
    '[', or :class:`UnmatchedOpenBracket` at the last '[' left open once the
    whole program has been scanned.
    """
    pairs = 0
    for _ in _match_pairs(program):
        pairs += 1
    logger.debug("validated %d bytes, %d loop(s)", len(program), pairs)


def build_jump_map(program: Program) -> Dict[int, int]:
    jump_map: Dict[int, int] = {}
    for start, end in _match_pairs(program):
        jump_map[start] = end
        jump_map[end] = start
    return jump_map


def find_matching_close(program: Program, open_pos: int) -> int:
    depth = 0
    for index in range(open_pos, len(program)):
        byte = program[index]
        if byte == LOOP_OPEN:
            depth += 1
        elif byte == LOOP_CLOSE:
            depth -= 1
            if depth == 0:
                return index
    raise ValueError(f"No matching ']' for position {open_pos}")


def find_matching_open(program: Program, close_pos: int) -> int:
    depth = 0
    for index in range(close_pos, -1, -1):
        byte = program[index]
        if byte == LOOP_CLOSE:
            depth += 1
        elif byte == LOOP_OPEN:
            depth -= 1
            if depth == 0:
                return index
    raise ValueError(f"No matching '[' for position {close_pos}")


__all__ = [
    "LOOP_OPEN",
    "LOOP_CLOSE",
    "Program",
    "as_program",
    "validate",
    "build_jump_map",
    "find_matching_close",
    "find_matching_open",
]
