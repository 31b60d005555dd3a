import logging
from enum import Enum
from typing import NamedTuple, Optional

from .ALU import alu, evaluate, to_signed32
from .Instruction import Instruction, InstType
from .Memory import Memory, RegisterFile

logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """An instruction the core cannot execute."""

    def __init__(self, message, instruction=None):
        self.message = message
        self.instruction = instruction
        super().__init__(message)


class MemoryAccessError(ExecutionError):
    pass


class State(Enum):
    IDLE = "idle"
    READY = "ready"
    HALTED = "halted"


class StepKind(Enum):
    EXECUTED = "executed"
    HALTED = "halted"
    ERROR = "error"


class StepOutcome(NamedTuple):
    kind: StepKind
    index: Optional[int] = None
    message: Optional[str] = None

    @classmethod
    def executed(cls, index):
        return cls(StepKind.EXECUTED, index=index)

    @classmethod
    def halted(cls):
        return cls(StepKind.HALTED)

    @classmethod
    def error(cls, message, index=None):
        return cls(StepKind.ERROR, index=index, message=message)


class StepEvent(NamedTuple):
    """What one step did; handed to step listeners."""
    outcome: StepOutcome
    pc_before: int
    pc_after: int
    instruction: Optional[Instruction] = None
    written_register: Optional[int] = None
    written_address: Optional[int] = None


class Core:
    """Single-cycle datapath: one instruction fully executed per step."""

    def __init__(self, memory_size=256):
        self.pc = 0
        self.registers = RegisterFile()
        self.memory = Memory(memory_size)
        self.instructions = []
        self.state = State.IDLE
        self.inst_executed = 0

    def load(self, instructions):
        self.instructions = list(instructions)
        self.reset()

    def reset(self):
        self.pc = 0
        self.registers.clear()
        self.memory.clear()
        self.inst_executed = 0
        self.state = State.READY if self.instructions else State.IDLE

    def end_pc(self):
        return len(self.instructions) * 4

    def pc_in_range(self):
        return 0 <= self.pc < self.end_pc()

    def is_halted(self):
        return self.state is State.HALTED

    def fetch(self):
        if self.pc % 4 != 0:
            raise ExecutionError(f"no instruction at PC={self.pc}")
        return self.instructions[self.pc // 4]

    def step(self):
        pc_before = self.pc
        if not self.pc_in_range():
            if self.state is not State.HALTED:
                logger.info("program finished at PC=%d", self.pc)
            self.state = State.HALTED
            return StepEvent(StepOutcome.halted(), pc_before, self.pc)

        inst = self.fetch()
        logger.debug("PC=%d executing %s", self.pc, inst.text)

        written_register = None
        written_address = None
        if inst.type is InstType.R:
            written_register = self.execute_r(inst)
        elif inst.type is InstType.I and inst.is_load:
            written_register = self.execute_load(inst)
        elif inst.type is InstType.I:
            written_register = self.execute_i(inst)
        elif inst.type is InstType.S:
            written_address = self.execute_store(inst)
        elif inst.type is InstType.B:
            self.execute_branch(inst)
        else:
            raise ExecutionError(f"unsupported instruction type: {inst.type}", inst)

        self.inst_executed += 1
        if not self.pc_in_range():
            self.state = State.HALTED
            logger.info("program finished at PC=%d", self.pc)

        return StepEvent(StepOutcome.executed(inst.index), pc_before, self.pc,
                         inst, written_register, written_address)

    # --- Per-type execution ---

    def write_back(self, rd, value):
        self.registers.write(rd, value)
        return rd

    def execute_r(self, inst):
        result = alu(inst.op, self.registers[inst.rs1], self.registers[inst.rs2])
        rd = self.write_back(inst.rd, result)
        self.pc += 4
        return rd

    def execute_i(self, inst):
        result = alu(inst.op, self.registers[inst.rs1], inst.imm)
        rd = self.write_back(inst.rd, result)
        self.pc += 4
        return rd

    def execute_load(self, inst):
        addr = to_signed32(self.registers[inst.rs1] + inst.imm)
        value = self.memory.read(addr)
        rd = self.write_back(inst.rd, value)
        self.pc += 4
        return rd

    def execute_store(self, inst):
        addr = to_signed32(self.registers[inst.rs1] + inst.imm)
        if not self.memory.in_range(addr):
            raise MemoryAccessError(
                f"store to address {addr} outside data memory (0..{self.memory.size - 1})", inst)
        self.memory.write(addr, self.registers[inst.rs2])
        self.pc += 4
        return addr

    def execute_branch(self, inst):
        taken = evaluate(inst.op, self.registers[inst.rs1], self.registers[inst.rs2])
        if not taken:
            self.pc += 4
            return

        target = self.pc + inst.imm
        if target == self.pc:
            # branch to itself: the program's way of saying "stop here"
            logger.info("self-loop at PC=%d, halting", self.pc)
            self.pc = self.end_pc()
            self.state = State.HALTED
            return
        self.pc = target
