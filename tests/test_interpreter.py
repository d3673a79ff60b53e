import io
import unittest

from tapebf import (
    BrainfuckInterpreter,
    CursorOverflow,
    CursorUnderflow,
    StepLimitExceeded,
    UnmatchedCloseBracket,
    UnmatchedOpenBracket,
)

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)
CAT = ",[.,]"


class BrainfuckInterpreterTests(unittest.TestCase):
    def test_multiplication_loop_outputs_a(self) -> None:
        interpreter = BrainfuckInterpreter()
        output = interpreter.run("++++++++[>++++++++<-]>+.")
        self.assertEqual(output, b"A")
        self.assertEqual(interpreter.tape_length, 2048)

    def test_hello_world(self) -> None:
        output = BrainfuckInterpreter().run(HELLO_WORLD)
        self.assertEqual(output, b"Hello World!\n")

    def test_comment_bytes_are_ignored(self) -> None:
        output = BrainfuckInterpreter().run("set 65: " + "+" * 65 + " then print it ." + "\n")
        self.assertEqual(output, b"A")

    def test_skips_loop_when_cell_is_zero(self) -> None:
        output = BrainfuckInterpreter().run("[.+++.]+.")
        self.assertEqual(output, b"\x01")

    def test_nested_loops(self) -> None:
        # 3 * 4 * 5 = 60 accumulated in cell 2
        output = BrainfuckInterpreter().run("+++[>++++[>+++++<-]<-]>>.")
        self.assertEqual(output, bytes([60]))

    def test_increment_wraps_after_256(self) -> None:
        interpreter = BrainfuckInterpreter()
        interpreter.run("+++" + "+" * 256)
        self.assertEqual(interpreter.tape[0], 3)

    def test_decrement_from_zero_yields_255(self) -> None:
        interpreter = BrainfuckInterpreter()
        output = interpreter.run("-.")
        self.assertEqual(output, b"\xff")
        self.assertEqual(interpreter.tape[0], 255)

    def test_move_left_at_start_underflows(self) -> None:
        interpreter = BrainfuckInterpreter()
        with self.assertRaises(CursorUnderflow) as ctx:
            interpreter.run("<")
        self.assertEqual(ctx.exception.position, 0)
        self.assertEqual(interpreter.pointer, 0)

    def test_underflow_reports_offending_position(self) -> None:
        with self.assertRaises(CursorUnderflow) as ctx:
            BrainfuckInterpreter().run("+>+<<")
        self.assertEqual(ctx.exception.position, 4)

    def test_move_right_at_last_cell_overflows(self) -> None:
        interpreter = BrainfuckInterpreter(tape_length=4)
        with self.assertRaises(CursorOverflow) as ctx:
            interpreter.run(">>>+>")
        self.assertEqual(ctx.exception.position, 4)
        self.assertEqual(interpreter.pointer, 3)
        self.assertEqual(interpreter.tape[3], 1)

    def test_default_tape_allows_last_cell(self) -> None:
        interpreter = BrainfuckInterpreter()
        interpreter.run(">" * 2047 + "+")
        self.assertEqual(interpreter.pointer, 2047)
        with self.assertRaises(CursorOverflow) as ctx:
            interpreter.run(">" * 2048)
        self.assertEqual(ctx.exception.position, 2047)

    def test_runtime_error_aborts_before_later_output(self) -> None:
        interpreter = BrainfuckInterpreter()
        with self.assertRaises(CursorUnderflow):
            interpreter.run("+.<.")
        self.assertEqual(bytes(interpreter.output_buffer), b"\x01")

    def test_unbalanced_program_never_executes(self) -> None:
        interpreter = BrainfuckInterpreter()
        with self.assertRaises(UnmatchedOpenBracket):
            interpreter.run("+.[")
        self.assertEqual(interpreter.output_buffer, bytearray())
        self.assertEqual(interpreter.tape[0], 0)
        with self.assertRaises(UnmatchedCloseBracket):
            interpreter.run("+.]")
        self.assertEqual(interpreter.output_buffer, bytearray())

    def test_input_from_data(self) -> None:
        output = BrainfuckInterpreter().run(",+.,+.", input_data=b"ab")
        self.assertEqual(output, b"bc")

    def test_eof_stores_255_by_default(self) -> None:
        interpreter = BrainfuckInterpreter()
        interpreter.run("+,")
        self.assertEqual(interpreter.tape[0], 255)

    def test_eof_value_zero(self) -> None:
        output = BrainfuckInterpreter(eof_value=0).run(CAT, input_data=b"xyz")
        self.assertEqual(output, b"xyz")

    def test_eof_unchanged(self) -> None:
        interpreter = BrainfuckInterpreter(eof_value=None)
        interpreter.run("+++,")
        self.assertEqual(interpreter.tape[0], 3)

    def test_streams(self) -> None:
        stdin = io.BytesIO(b"hi")
        stdout = io.BytesIO()
        interpreter = BrainfuckInterpreter(eof_value=0)
        result = interpreter.run(CAT, input_stream=stdin, output_stream=stdout)
        self.assertEqual(stdout.getvalue(), b"hi")
        self.assertEqual(result, b"")

    def test_output_stream_receives_bytes_before_failure(self) -> None:
        stdout = io.BytesIO()
        with self.assertRaises(CursorUnderflow):
            BrainfuckInterpreter().run("+++.<", output_stream=stdout)
        self.assertEqual(stdout.getvalue(), b"\x03")

    def test_runs_are_repeatable(self) -> None:
        interpreter = BrainfuckInterpreter()
        program = ",[>+++<-]>.,."
        first = interpreter.run(program, input_data=[7, 9])
        second = interpreter.run(program, input_data=[7, 9])
        self.assertEqual(first, second)
        self.assertEqual(first, bytes([21, 9]))

    def test_precomputed_jumps_match_on_demand_resolution(self) -> None:
        on_demand = BrainfuckInterpreter().run(HELLO_WORLD)
        precomputed = BrainfuckInterpreter(precompute_jumps=True).run(HELLO_WORLD)
        self.assertEqual(on_demand, precomputed)

    def test_precomputed_jumps_still_validate(self) -> None:
        with self.assertRaises(UnmatchedCloseBracket):
            BrainfuckInterpreter(precompute_jumps=True).run("]")

    def test_step_limit_exceeded(self) -> None:
        interpreter = BrainfuckInterpreter()
        with self.assertRaises(StepLimitExceeded) as ctx:
            interpreter.run("+[]", max_steps=10)
        self.assertEqual(ctx.exception.steps, 10)

    def test_snapshot_after_run_matches_final_step_state(self) -> None:
        program = "++++++++[>++++++++<-]>+."
        stepped = list(BrainfuckInterpreter().step(program, tape_window=3))[-1]
        interpreter = BrainfuckInterpreter()
        interpreter.run(program)
        self.assertEqual(interpreter.snapshot(len(program), tape_window=3), stepped)
        self.assertEqual(interpreter.steps, stepped.step)

    def test_rejects_invalid_configuration(self) -> None:
        with self.assertRaises(ValueError):
            BrainfuckInterpreter(tape_length=0)
        with self.assertRaises(ValueError):
            BrainfuckInterpreter(eof_value=256)


class BrainfuckInterpreterStepTests(unittest.TestCase):
    def test_step_sequence_produces_states(self) -> None:
        interpreter = BrainfuckInterpreter()
        program = "+++."
        states = list(interpreter.step(program, tape_window=2))
        commands = [state.command for state in states[:-1]]
        self.assertEqual(commands, ["+", "+", "+", "."])
        self.assertEqual(states[-1].output, b"\x03")
        self.assertIsNone(states[-1].command)
        self.assertEqual(states[-1].pc, len(program))
        self.assertEqual(states[-1].step, 4)

    def test_jump_sets_pc_past_matching_bracket(self) -> None:
        states = list(BrainfuckInterpreter().step("[-]+"))
        self.assertEqual(states[0].command, "[")
        self.assertEqual(states[0].pc, 3)
        self.assertEqual(states[1].command, "+")

    def test_tape_window_around_pointer(self) -> None:
        states = list(BrainfuckInterpreter().step(">>>>>+", tape_window=2))
        final = states[-1]
        self.assertEqual(final.pointer, 5)
        self.assertEqual(final.tape_start, 3)
        self.assertEqual(final.tape, [0, 0, 1, 0, 0])

    def test_step_limit(self) -> None:
        stepper = BrainfuckInterpreter().step("+[]", max_steps=4)
        with self.assertRaises(StepLimitExceeded):
            while True:
                next(stepper)


if __name__ == "__main__":
    unittest.main()
