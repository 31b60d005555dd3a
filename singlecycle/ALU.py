MASK32 = 0xFFFFFFFF


def to_signed32(value):
    """Wrap an arbitrary Python int to a signed 32-bit value."""
    value &= MASK32
    if value & 0x80000000:
        return value - (1 << 32)
    return value


def to_unsigned32(value):
    return value & MASK32


def alu(op, a, b):
    """Result of the arithmetic/logic opcode ``op`` on two 32-bit operands.

    ``op`` is the mnemonic string or an ``Opcode``; the I-type forms share
    the R-type behavior. Unknown opcodes give 0.
    """
    op = getattr(op, "value", op)
    a = to_signed32(a)
    b = to_signed32(b)
    shamt = b & 0x1F

    if op in ("add", "addi"):
        result = a + b
    elif op == "sub":
        result = a - b
    elif op in ("and", "andi"):
        result = a & b
    elif op in ("or", "ori"):
        result = a | b
    elif op in ("xor", "xori"):
        result = a ^ b
    elif op in ("sll", "slli"):
        result = a << shamt
    elif op in ("srl", "srli"):
        result = to_unsigned32(a) >> shamt
    elif op in ("sra", "srai"):
        result = a >> shamt
    elif op in ("slt", "slti"):
        result = 1 if a < b else 0
    elif op in ("sltu", "sltiu"):
        result = 1 if to_unsigned32(a) < to_unsigned32(b) else 0
    else:
        result = 0

    return to_signed32(result)


def evaluate(op, a, b):
    """Taken/not-taken outcome of a branch comparison."""
    op = getattr(op, "value", op)
    a = to_signed32(a)
    b = to_signed32(b)

    if op == "beq":
        return a == b
    elif op == "bne":
        return a != b
    elif op == "blt":
        return a < b
    elif op == "bge":
        return a >= b
    elif op == "bltu":
        return to_unsigned32(a) < to_unsigned32(b)
    elif op == "bgeu":
        return to_unsigned32(a) >= to_unsigned32(b)
    return False
