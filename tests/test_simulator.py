import threading

import pytest

from singlecycle.Assembler import ParseError, UnsupportedInstruction
from singlecycle.Core import State, StepKind
from singlecycle.Instruction import Instruction, Opcode
from singlecycle.Simulator import Simulator


class TestLoad:
    def test_load_reports_instruction_count(self, sim):
        result = sim.load("start:\naddi x1, x0, 1\naddi x2, x0, 2\n")
        assert result.ok
        assert result.instruction_count == 2
        assert sim.labels == {'start': 0}
        assert sim.state is State.READY

    def test_parse_error_keeps_previous_program(self, sim):
        sim.load("addi x1, x0, 5")
        sim.step()

        result = sim.load("foo x1, x2, x3")
        assert not result.ok
        assert isinstance(result.error, UnsupportedInstruction)
        assert result.error.mnemonic == 'foo'
        assert len(sim.instructions) == 1
        assert sim.instructions[0].text == "addi x1, x0, 5"
        assert sim.inspect_registers()[1] == 5

    @pytest.mark.parametrize("source", [",", "loop: ,", "add x\u00b2, x0, x0", "addi x1, x0, 1_000"])
    def test_malformed_lines_come_back_as_parse_errors(self, sim, source):
        sim.load("addi x1, x0, 5")
        result = sim.load(source)
        assert not result.ok
        assert isinstance(result.error, ParseError)
        assert result.error.line_number == 1
        assert sim.instructions[0].text == "addi x1, x0, 5"

    def test_load_resets_state(self, sim):
        sim.load("addi x1, x0, 5\nsw x1, 0(x0)")
        sim.run(delay=0)
        sim.load("addi x2, x0, 1")
        assert sim.current_pc() == 0
        assert sim.inspect_registers() == [0] * 32
        assert sim.inspect_memory(0, 4) == {0: 0}


class TestStep:
    def test_step_outcomes(self, sim):
        sim.load("addi x1, x0, 1")
        assert sim.step().kind is StepKind.EXECUTED
        assert sim.is_halted()
        assert sim.step().kind is StepKind.HALTED

    def test_step_reports_index(self, sim):
        sim.load("addi x1, x0, 1\naddi x2, x0, 2")
        sim.step()
        assert sim.step().index == 1

    def test_execution_error_becomes_outcome(self, sim):
        sim.load("addi x1, x0, 300\nsw x1, 0(x1)")
        sim.step()
        outcome = sim.step()
        assert outcome.kind is StepKind.ERROR
        assert outcome.index == 1
        assert "outside data memory" in outcome.message
        assert sim.current_pc() == 4
        assert sim.state is State.READY

    def test_listeners_see_every_step(self, sim):
        events = []
        sim.subscribe(events.append)
        sim.load("addi x5, x0, 42\nsw x5, 8(x0)")
        sim.run(delay=0)
        sim.step()

        assert [e.outcome.kind for e in events] == [StepKind.EXECUTED, StepKind.EXECUTED, StepKind.HALTED]
        assert events[0].written_register == 5
        assert events[1].written_address == 8
        assert (events[1].pc_before, events[1].pc_after) == (4, 8)

        sim.unsubscribe(events.append)
        sim.reset()
        sim.step()
        assert len(events) == 3


class TestRun:
    def test_run_to_self_loop(self, run_program):
        sim = run_program("addi x1, x0, 3\nloop: addi x1, x1, -1\nbne x1, x0, loop\nend: beq x0, x0, end\n")
        assert sim.is_halted()
        assert sim.inspect_registers()[1] == 0
        assert sim.current_pc() == 4 * 4

    def test_store_load_round_trip(self, run_program):
        sim = run_program("addi x5, x0, 42\nsw x5, 8(x0)\nlw x6, 8(x0)")
        assert sim.inspect_registers()[6] == 42
        assert sim.inspect_memory(8, 12) == {8: 42}

    def test_zero_register_invariant(self, sim):
        sim.load("addi x0, x0, 1\nadd x0, x1, x1\nlw x0, 0(x0)\naddi x1, x0, 9")
        while not sim.is_halted():
            sim.step()
            assert sim.inspect_registers()[0] == 0

    def test_open_loop_stops_at_max_steps(self, sim):
        sim.load("loop: addi x1, x1, 1\nbeq x0, x0, loop")
        result = sim.run(delay=0, max_steps=10)
        assert result.steps == 10
        assert not result.halted
        assert sim.inspect_registers()[1] == 5

    def test_run_stops_on_error(self, sim):
        sim.load("addi x1, x0, -4\nsw x1, 0(x1)\naddi x2, x0, 1")
        result = sim.run(delay=0)
        assert result.outcome.kind is StepKind.ERROR
        assert result.steps == 1
        assert sim.inspect_registers()[2] == 0

    def test_cancelled_before_start(self, sim):
        sim.load("addi x1, x0, 1")
        cancel = threading.Event()
        cancel.set()
        result = sim.run(cancel=cancel, delay=0)
        assert result.cancelled
        assert result.steps == 0
        assert sim.current_pc() == 0

    def test_stop_from_listener(self, sim):
        sim.load("loop: addi x1, x1, 1\nbeq x0, x0, loop")
        sim.subscribe(lambda event: sim.stop() if event.pc_after == 0 else None)
        result = sim.run(delay=0)
        assert result.cancelled
        assert result.steps == 2

    def test_deterministic(self):
        source = "addi x1, x0, 5\nloop: addi x2, x2, 3\naddi x1, x1, -1\nsw x2, 0(x0)\nbne x1, x0, loop"

        def trace():
            sim = Simulator()
            sim.load(source)
            snapshots = []
            while not sim.is_halted():
                sim.step()
                snapshots.append((sim.inspect_registers(), sim.inspect_memory()))
            return snapshots

        assert trace() == trace()


class TestReset:
    def test_reset_keeps_program(self, sim):
        sim.load("addi x1, x0, 1")
        sim.run(delay=0)
        sim.reset()
        assert sim.state is State.READY
        assert not sim.is_halted()
        assert len(sim.instructions) == 1

    def test_reset_without_program_is_idle(self, sim):
        sim.reset()
        assert sim.state is State.IDLE


def test_instances_are_independent():
    a = Simulator()
    b = Simulator()
    a.load("addi x1, x0, 1")
    a.run(delay=0)
    assert b.inspect_registers()[1] == 0
    assert b.state is State.IDLE


def test_memory_size_from_config(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("memory:\n  size: 64\n")
    sim = Simulator(config_path=str(config))
    assert sim.core.memory.size == 64
    assert sim.config['run']['max_steps'] == 10000


def test_opcode_enum_is_closed():
    assert Opcode('add') is Opcode.ADD
    assert Instruction.__dataclass_params__.frozen
