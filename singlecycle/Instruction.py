from dataclasses import dataclass
from enum import Enum


class InstType(Enum):
    R = "R"
    I = "I"
    S = "S"
    B = "B"


class Opcode(Enum):
    # R-type
    ADD = "add"
    SUB = "sub"
    AND = "and"
    OR = "or"
    XOR = "xor"
    SLL = "sll"
    SRL = "srl"
    SRA = "sra"
    SLT = "slt"
    SLTU = "sltu"
    # I-type arithmetic
    ADDI = "addi"
    ANDI = "andi"
    ORI = "ori"
    XORI = "xori"
    SLTI = "slti"
    SLTIU = "sltiu"
    SLLI = "slli"
    SRLI = "srli"
    SRAI = "srai"
    # memory
    LW = "lw"
    SW = "sw"
    # branches
    BEQ = "beq"
    BNE = "bne"
    BLT = "blt"
    BGE = "bge"
    BLTU = "bltu"
    BGEU = "bgeu"


R_OPS = {"add", "sub", "and", "or", "xor", "sll", "srl", "sra", "slt", "sltu"}
I_OPS = {"addi", "andi", "ori", "xori", "slti", "sltiu", "slli", "srli", "srai"}
LOAD_OPS = {"lw", "lb", "lh", "lbu", "lhu", "li"}
STORE_OPS = {"sw", "sb", "sh"}
BRANCH_OPS = {"beq", "bne", "blt", "bge", "bltu", "bgeu"}


@dataclass(frozen=True)
class Instruction:
    """One decoded source line.

    Loads are normalized to ``lw`` (type I) and stores to ``sw`` (type S).
    Fields an instruction class does not use stay at 0.
    """
    type: InstType
    op: Opcode
    address: int
    text: str
    line: int = 0
    rd: int = 0
    rs1: int = 0
    rs2: int = 0
    imm: int = 0

    @property
    def index(self):
        return self.address // 4

    @property
    def is_load(self):
        return self.op is Opcode.LW
