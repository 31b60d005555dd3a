import logging
import re

from .ALU import to_signed32
from .Instruction import (Instruction, InstType, Opcode,
                          R_OPS, I_OPS, LOAD_OPS, STORE_OPS, BRANCH_OPS)

logger = logging.getLogger(__name__)

REGISTERS = {
    'zero': 0, 'ra': 1, 'sp': 2, 'gp': 3, 'tp': 4,
    't0': 5, 't1': 6, 't2': 7, 's0': 8, 'fp': 8, 's1': 9,
    'a0': 10, 'a1': 11, 'a2': 12, 'a3': 13, 'a4': 14, 'a5': 15, 'a6': 16, 'a7': 17,
    's2': 18, 's3': 19, 's4': 20, 's5': 21, 's6': 22, 's7': 23,
    's8': 24, 's9': 25, 's10': 26, 's11': 27,
    't3': 28, 't4': 29, 't5': 30, 't6': 31,
}

# offset(base), e.g. "-8(sp)"
MEM_OPERAND = re.compile(r'(-?[0-9]+)\((\w+)\)')
# decimal, 0x hex or 0b binary, one optional sign
IMMEDIATE = re.compile(r'[+-]?(0x[0-9a-f]+|0b[01]+|[0-9]+)')
REG_INDEX = re.compile(r'[0-9]+')
LABEL_NAME = re.compile(r'[A-Za-z_.$][\w.$]*')


class ParseError(Exception):
    """A source line that cannot be assembled."""

    def __init__(self, message, line_number=None, text=None, mnemonic=None):
        self.message = message
        self.line_number = line_number
        self.text = text
        self.mnemonic = mnemonic
        super().__init__(str(self))

    def __str__(self):
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message} ({self.text!r})"


class UnsupportedInstruction(ParseError):
    pass


class FormatError(ParseError):
    pass


class UnknownRegister(ParseError):
    pass


class BadImmediate(ParseError):
    pass


def strip_line(line):
    """Remove the trailing comment and surrounding whitespace."""
    return line.split('#', 1)[0].strip()


def split_label(line):
    """Split a leading ``name:`` off a line.

    Returns (label, rest); label is None when the line has no label.
    """
    if line.endswith(':'):
        return line[:-1].strip(), ''
    label, sep, rest = line.partition(':')
    if sep and LABEL_NAME.fullmatch(label.strip()):
        return label.strip(), rest.strip()
    return None, line


def tokenize(line):
    # commas are separators, same as whitespace
    return line.replace(',', ' ').split()


class Assembler:
    """Two-pass translator from source text to Instruction records.

    Pass 1 assigns a byte address to every instruction line and records the
    labels, so branches may refer to labels defined further down. Pass 2
    decodes each line against the finished label table.
    """

    def __init__(self):
        self.labels = {}
        self.instructions = []

    def assemble(self, source):
        self.labels = {}
        self.instructions = []
        lines = source.splitlines()

        logger.debug("pass 1: collecting labels")
        address = 0
        for number, raw in enumerate(lines, start=1):
            line = strip_line(raw)
            if not line:
                continue
            label, rest = split_label(line)
            if label is not None:
                self.labels[label] = address
                logger.debug("label %s -> %d", label, address)
            if rest:
                address += 4

        logger.debug("pass 2: decoding %d instruction(s)", address // 4)
        address = 0
        for number, raw in enumerate(lines, start=1):
            line = strip_line(raw)
            if not line:
                continue
            _, rest = split_label(line)
            if not rest:
                continue
            self.instructions.append(self.parse_instruction(rest, address, number, line))
            address += 4

        return self.instructions, dict(self.labels)

    def parse_instruction(self, line, address, number, text):
        parts = tokenize(line)
        if not parts:
            raise FormatError("missing mnemonic", number, text)
        op = parts[0].lower()

        def operand(i):
            if i >= len(parts):
                raise FormatError(f"missing operand {i} for '{op}'", number, text, op)
            return parts[i]

        def reg(token):
            return self.get_reg(token, number, text, op)

        def imm(token):
            return self.get_imm(token, address, number, text, op)

        def mem_operand(token):
            match = MEM_OPERAND.fullmatch(token)
            if not match:
                raise FormatError(f"invalid format for '{op}', expected offset(register)",
                                  number, text, op)
            return int(match.group(1)), reg(match.group(2))

        common = dict(address=address, text=text, line=number)

        if op in R_OPS:
            return Instruction(InstType.R, Opcode(op), rd=reg(operand(1)),
                               rs1=reg(operand(2)), rs2=reg(operand(3)), **common)

        if op in I_OPS:
            return Instruction(InstType.I, Opcode(op), rd=reg(operand(1)),
                               rs1=reg(operand(2)), imm=imm(operand(3)), **common)

        if op in LOAD_OPS:
            rd = reg(operand(1))
            offset, base = mem_operand(operand(2))
            return Instruction(InstType.I, Opcode.LW, rd=rd, rs1=base,
                               imm=to_signed32(offset), **common)

        if op in STORE_OPS:
            value = reg(operand(1))
            offset, base = mem_operand(operand(2))
            return Instruction(InstType.S, Opcode.SW, rs1=base, rs2=value,
                               imm=to_signed32(offset), **common)

        if op in BRANCH_OPS:
            return Instruction(InstType.B, Opcode(op), rs1=reg(operand(1)),
                               rs2=reg(operand(2)), imm=imm(operand(3)), **common)

        raise UnsupportedInstruction(f"unsupported instruction '{op}'", number, text, op)

    def get_reg(self, token, number=None, text=None, op=None):
        name = token.strip().lower()
        if name in REGISTERS:
            return REGISTERS[name]

        digits = name[1:] if name.startswith('x') else name
        if REG_INDEX.fullmatch(digits):
            index = int(digits)
            if 0 <= index < 32:
                return index
        raise UnknownRegister(f"unknown register '{token}'", number, text, op)

    def get_imm(self, token, address, number=None, text=None, op=None):
        token = token.strip()
        if token in self.labels:
            return self.labels[token] - address

        lowered = token.lower()
        if not IMMEDIATE.fullmatch(lowered):
            raise BadImmediate(f"undefined label or bad immediate '{token}'", number, text, op)

        sign = -1 if lowered[0] == '-' else 1
        digits = lowered.lstrip('+-')
        if digits.startswith('0x'):
            value = int(digits[2:], 16)
        elif digits.startswith('0b'):
            value = int(digits[2:], 2)
        else:
            value = int(digits, 10)
        return to_signed32(sign * value)


def assemble(source):
    """Assemble ``source``; returns (instructions, labels)."""
    return Assembler().assemble(source)
