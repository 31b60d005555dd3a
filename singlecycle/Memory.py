from .ALU import to_signed32

ABI_NAMES = ['zero', 'ra', 'sp', 'gp', 'tp', 't0', 't1', 't2', 's0', 's1',
             'a0', 'a1', 'a2', 'a3', 'a4', 'a5', 'a6', 'a7',
             's2', 's3', 's4', 's5', 's6', 's7', 's8', 's9',
             's10', 's11', 't3', 't4', 't5', 't6']


class RegisterFile:
    def __init__(self):
        self.registers = [0] * 32

    def write(self, index, value):
        self.registers[index] = to_signed32(value)
        # x0 is hardwired to zero
        self.registers[0] = 0

    def clear(self):
        self.registers = [0] * 32

    def snapshot(self):
        return list(self.registers)

    def __getitem__(self, index):
        return self.registers[index]


class Memory:
    """Data memory indexed by byte address.

    Each slot holds a whole 32-bit word; word-aligned access is assumed, so
    only every fourth address is normally used.
    """

    def __init__(self, size=256):
        self.size = size
        self.memory = [0] * size

    def in_range(self, address):
        return 0 <= address < self.size

    def read(self, address):
        if not self.in_range(address):
            return 0
        return self.memory[address]

    def write(self, address, value):
        self.memory[address] = to_signed32(value)

    def clear(self):
        self.memory = [0] * self.size

    def words(self, start=0, stop=None):
        """Word-aligned view of memory as {address: value}."""
        if stop is None:
            stop = self.size
        start = max(0, start)
        start += (-start) % 4
        stop = min(stop, self.size)

        return {address: self.memory[address] for address in range(start, stop, 4)}
