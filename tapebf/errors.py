from __future__ import annotations

from typing import Optional


class BrainfuckError(Exception):
    """Base class for every error raised while loading, validating or running a program."""


# === Loading ===


class LoadError(BrainfuckError):
    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(message)


class SourceNotFound(LoadError):
    def __init__(self, path: str) -> None:
        super().__init__(path, f'The file "{path}" does not exist!')


class SourceUnreadable(LoadError):
    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        message = f'The file "{path}" cannot be opened'
        if reason:
            message = f"{message}: {reason}"
        super().__init__(path, message)


class EmptyProgram(LoadError):
    def __init__(self, path: str) -> None:
        super().__init__(path, "An empty source file was given!")


class MemoryMapFailure(LoadError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(path, f'Could not map "{path}" into memory: {reason}')


# === Bracket validation ===


class BracketError(BrainfuckError):
    kind = "bracket"
    description = "unbalanced bracket"

    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(f"Error at ch:{position}: {self.description}.")


class UnmatchedOpenBracket(BracketError):
    kind = "unmatched_open"
    description = "'[' without matching ']'"


class UnmatchedCloseBracket(BracketError):
    kind = "unmatched_close"
    description = "']' without matching '['"


# === Execution ===


class CursorError(BrainfuckError):
    kind = "cursor"
    description = "cursor left the tape"

    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(f"Error at ch:{position}: {self.description}.")


class CursorOverflow(CursorError):
    kind = "cursor_overflow"
    description = "Passed maximum cell position"


class CursorUnderflow(CursorError):
    kind = "cursor_underflow"
    description = "Passed minimum cell position"


class StepLimitExceeded(BrainfuckError):
    """Raised when Brainfuck execution exceeds the configured step budget."""

    def __init__(self, steps: int) -> None:
        self.steps = steps
        super().__init__(f"Brainfuck program exceeded allowed step count ({steps})")


__all__ = [
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
