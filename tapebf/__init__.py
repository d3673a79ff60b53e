from .bf_interpreter import BrainfuckInterpreter, ExecutionState
from .brackets import build_jump_map, find_matching_close, find_matching_open, validate
from .errors import (
    BracketError,
    BrainfuckError,
    CursorError,
    CursorOverflow,
    CursorUnderflow,
    EmptyProgram,
    LoadError,
    MemoryMapFailure,
    SourceNotFound,
    SourceUnreadable,
    StepLimitExceeded,
    UnmatchedCloseBracket,
    UnmatchedOpenBracket,
)
from .loader import open_program

__all__ = [
    "BrainfuckInterpreter",
    "ExecutionState",
    "validate",
    "build_jump_map",
    "find_matching_close",
    "find_matching_open",
    "open_program",
    "BrainfuckError",
    "LoadError",
    "SourceNotFound",
    "SourceUnreadable",
    "EmptyProgram",
    "MemoryMapFailure",
    "BracketError",
    "UnmatchedOpenBracket",
    "UnmatchedCloseBracket",
    "CursorError",
    "CursorOverflow",
    "CursorUnderflow",
    "StepLimitExceeded",
]
