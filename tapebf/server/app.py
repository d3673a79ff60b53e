from __future__ import annotations

import logging
from typing import List, Literal, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from tapebf.bf_interpreter import (
    DEFAULT_EOF_VALUE,
    DEFAULT_TAPE_LENGTH,
    BrainfuckInterpreter,
    ExecutionState,
)
from tapebf.brackets import as_program, validate
from tapebf.errors import BracketError, CursorError, StepLimitExceeded

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 1_000_000
MAX_STEPS_LIMIT = 10_000_000

EOF_VALUES = {
    "255": DEFAULT_EOF_VALUE,
    "0": 0,
    "unchanged": None,
}


def _string_to_input_bytes(data: str) -> bytes:
    return data.encode("utf-8")


def _error_detail(exc: BracketError | CursorError) -> dict:
    return {
        "kind": exc.kind,
        "position": exc.position,
        "message": str(exc),
    }


class ErrorDetail(BaseModel):
    kind: str
    position: int
    message: str


class ValidateRequest(BaseModel):
    code: str


class ValidateResponse(BaseModel):
    valid: bool
    error: Optional[ErrorDetail] = None


class RunRequest(BaseModel):
    code: str
    input: str = ""
    tape_length: int = Field(default=DEFAULT_TAPE_LENGTH, ge=1, le=1_000_000)
    eof: Literal["255", "0", "unchanged"] = "255"
    max_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1, le=MAX_STEPS_LIMIT)
    tape_window: int = Field(default=10, ge=0)
    precompute_jumps: bool = False


class RunState(BaseModel):
    step: int
    pc: int
    pointer: int
    tape_start: int
    tape: List[int]
    code_length: int


class RunResponse(BaseModel):
    output: str
    output_bytes: List[int]
    state: RunState


def _state_to_model(state: ExecutionState) -> RunState:
    return RunState(
        step=state.step,
        pc=state.pc,
        pointer=state.pointer,
        tape_start=state.tape_start,
        tape=list(state.tape),
        code_length=state.code_length,
    )


def create_app() -> FastAPI:
    app = FastAPI(title="tapebf API", version="0.1.0")

    @app.post("/api/validate", response_model=ValidateResponse)
    def validate_code(payload: ValidateRequest) -> ValidateResponse:
        try:
            validate(as_program(payload.code))
        except BracketError as exc:
            return ValidateResponse(valid=False, error=ErrorDetail(**_error_detail(exc)))
        return ValidateResponse(valid=True)

    @app.post("/api/run", response_model=RunResponse)
    def run_code(payload: RunRequest) -> RunResponse:
        interpreter = BrainfuckInterpreter(
            tape_length=payload.tape_length,
            eof_value=EOF_VALUES[payload.eof],
            precompute_jumps=payload.precompute_jumps,
        )
        program = as_program(payload.code)
        try:
            interpreter.run(
                program,
                input_data=_string_to_input_bytes(payload.input),
                max_steps=payload.max_steps,
            )
        except BracketError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=_error_detail(exc),
            ) from exc
        except CursorError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=_error_detail(exc),
            ) from exc
        except StepLimitExceeded as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"kind": "step_limit", "steps": exc.steps, "message": str(exc)},
            ) from exc

        final_state = interpreter.snapshot(len(program), tape_window=payload.tape_window)
        logger.debug("run finished after %d step(s)", final_state.step)
        return RunResponse(
            output=final_state.output.decode("latin-1"),
            output_bytes=list(final_state.output),
            state=_state_to_model(final_state),
        )

    return app


__all__ = ["create_app"]
