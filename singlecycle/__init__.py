from .ALU import alu, evaluate
from .Assembler import (Assembler, ParseError, UnsupportedInstruction, FormatError,
                        UnknownRegister, BadImmediate, assemble)
from .Core import Core, ExecutionError, MemoryAccessError, State, StepKind, StepOutcome, StepEvent
from .Instruction import Instruction, InstType, Opcode
from .Simulator import Simulator, LoadResult, RunResult
