from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .brackets import (
    LOOP_CLOSE,
    LOOP_OPEN,
    Program,
    as_program,
    build_jump_map,
    find_matching_close,
    find_matching_open,
    validate,
)
from .errors import CursorOverflow, CursorUnderflow, StepLimitExceeded

logger = logging.getLogger(__name__)

DEFAULT_TAPE_LENGTH = 2048
# Byte value of C's EOF (-1) once stored in a cell.
DEFAULT_EOF_VALUE = 255

MOVE_RIGHT = ord(">")
MOVE_LEFT = ord("<")
INCREMENT = ord("+")
DECREMENT = ord("-")
OUTPUT = ord(".")
INPUT = ord(",")


@dataclass
class ExecutionState:
    step: int
    pc: int
    command: Optional[str]
    pointer: int
    tape_start: int
    tape: List[int]
    output: bytes
    code_length: int


@dataclass
class BrainfuckInterpreter:
    """Runs a program against a fixed-size tape of byte cells.

    ``eof_value`` is stored by ',' once input is exhausted; ``None`` leaves the
    cell unchanged. With ``precompute_jumps`` the loop partners are paired in
    one pass up front instead of being searched for on every jump.
    """

    tape_length: int = DEFAULT_TAPE_LENGTH
    eof_value: Optional[int] = DEFAULT_EOF_VALUE
    precompute_jumps: bool = False

    tape: bytearray = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    output_buffer: bytearray = field(init=False, repr=False)
    steps: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.tape_length < 1:
            raise ValueError("tape_length must be at least 1")
        if self.eof_value is not None and not 0 <= self.eof_value <= 255:
            raise ValueError("eof_value must be a byte value or None")
        self.reset()

    def reset(self) -> None:
        self.tape = bytearray(self.tape_length)
        self.pointer = 0
        self.output_buffer = bytearray()
        self.steps = 0

    def run(
        self,
        code: Union[str, Program],
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
        *,
        input_stream: Optional[BinaryIO] = None,
        output_stream: Optional[BinaryIO] = None,
    ) -> bytes:
        """Execute ``code`` to completion and return the collected output.

        When ``output_stream`` is given, bytes are written there instead of
        being collected, and the returned value is empty.
        """
        for _ in self._execute(code, input_data, max_steps, input_stream, output_stream):
            pass
        logger.debug("program finished after %d step(s)", self.steps)
        return bytes(self.output_buffer)

    def step(
        self,
        code: Union[str, Program],
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
        tape_window: int = 10,
    ) -> Iterator[ExecutionState]:
        program = as_program(code)
        code_length = len(program)
        steps = 0
        for steps, pc, command in self._execute(program, input_data, max_steps, None, None):
            yield self._snapshot(pc, chr(command), steps, code_length, tape_window)

        # Emit final snapshot indicating completion
        yield self._snapshot(code_length, None, steps, code_length, tape_window)

    def _execute(
        self,
        code: Union[str, Program],
        input_data: Optional[Iterable[int]],
        max_steps: Optional[int],
        input_stream: Optional[BinaryIO],
        output_stream: Optional[BinaryIO],
    ) -> Iterator[Tuple[int, int, int]]:
        self.reset()
        program = as_program(code)
        if self.precompute_jumps:
            jump_map: Optional[Dict[int, int]] = build_jump_map(program)
        else:
            validate(program)
            jump_map = None
        read_byte = self._input_reader(input_data, input_stream)
        pc = 0
        steps = 0
        code_length = len(program)

        try:
            while pc < code_length:
                if max_steps is not None and steps >= max_steps:
                    raise StepLimitExceeded(max_steps)

                command = program[pc]
                pc = self._execute_instruction(
                    command, pc, program, jump_map, read_byte, output_stream
                )
                steps += 1
                self.steps = steps
                yield steps, pc, command
        finally:
            if output_stream is not None:
                output_stream.flush()

    def _execute_instruction(
        self,
        command: int,
        pc: int,
        program: Program,
        jump_map: Optional[Dict[int, int]],
        read_byte: Callable[[], Optional[int]],
        output_stream: Optional[BinaryIO],
    ) -> int:
        new_pc = pc + 1
        if command == MOVE_RIGHT:
            if self.pointer == self.tape_length - 1:
                raise CursorOverflow(pc)
            self.pointer += 1
        elif command == MOVE_LEFT:
            if self.pointer == 0:
                raise CursorUnderflow(pc)
            self.pointer -= 1
        elif command == INCREMENT:
            self.tape[self.pointer] = (self.tape[self.pointer] + 1) & 0xFF
        elif command == DECREMENT:
            self.tape[self.pointer] = (self.tape[self.pointer] - 1) & 0xFF
        elif command == OUTPUT:
            value = self.tape[self.pointer]
            if output_stream is not None:
                output_stream.write(bytes((value,)))
            else:
                self.output_buffer.append(value)
        elif command == INPUT:
            value = read_byte()
            if value is None:
                if self.eof_value is not None:
                    self.tape[self.pointer] = self.eof_value
            else:
                self.tape[self.pointer] = value & 0xFF
        elif command == LOOP_OPEN:
            if self.tape[self.pointer] == 0:
                if jump_map is not None:
                    new_pc = jump_map[pc] + 1
                else:
                    new_pc = find_matching_close(program, pc) + 1
        elif command == LOOP_CLOSE:
            if self.tape[self.pointer] != 0:
                if jump_map is not None:
                    new_pc = jump_map[pc] + 1
                else:
                    new_pc = find_matching_open(program, pc) + 1
        return new_pc

    @staticmethod
    def _input_reader(
        input_data: Optional[Iterable[int]],
        input_stream: Optional[BinaryIO],
    ) -> Callable[[], Optional[int]]:
        if input_stream is not None:

            def read_stream() -> Optional[int]:
                chunk = input_stream.read(1)
                return chunk[0] if chunk else None

            return read_stream

        input_iter = iter(input_data or [])

        def read_data() -> Optional[int]:
            return next(input_iter, None)

        return read_data

    def snapshot(self, code_length: int, tape_window: int = 10) -> ExecutionState:
        """Return the state after the last run, as the final ``step`` state reports it."""
        return self._snapshot(code_length, None, self.steps, code_length, tape_window)

    def _snapshot(
        self,
        pc: int,
        command: Optional[str],
        step: int,
        code_length: int,
        tape_window: int,
    ) -> ExecutionState:
        start = max(0, self.pointer - tape_window)
        end = min(self.tape_length, self.pointer + tape_window + 1)
        tape_view = list(self.tape[start:end])
        return ExecutionState(
            step=step,
            pc=pc,
            command=command,
            pointer=self.pointer,
            tape_start=start,
            tape=tape_view,
            output=bytes(self.output_buffer),
            code_length=code_length,
        )


__all__ = [
    "DEFAULT_TAPE_LENGTH",
    "DEFAULT_EOF_VALUE",
    "BrainfuckInterpreter",
    "ExecutionState",
    "StepLimitExceeded",
]
