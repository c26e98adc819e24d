"""errors raised by the CHIP-8 core, every one of them ends the current run"""


class Chip8Fault(Exception):
    """base class for every fault raised while stepping the machine"""


class DecodeFailure(Chip8Fault):
    def __init__(self, opcode: int):
        super().__init__(f"Unable to decode opcode 0x{opcode:04x}")
        self.opcode = opcode


class StackOverflow(Chip8Fault, IndexError):
    def __init__(self, capacity: int = 16):
        super().__init__(f"The CHIP-8 stack can contain at most {capacity} addresses. Limit exceeded")
        self.capacity = capacity


class StackUnderflow(Chip8Fault, IndexError):
    def __init__(self):
        super().__init__("Tried to pop a return address from an empty CHIP-8 stack")


class MemoryOutOfBounds(Chip8Fault, IndexError):
    def __init__(self, address: int, length: int = 1):
        if length > 1:
            msg = f"Memory access out of bounds at address 0x{address:04x} ({length} bytes)"
        else:
            msg = f"Memory access out of bounds at address 0x{address:04x}"
        super().__init__(msg)
        self.address = address
        self.length = length


class UnsupportedWithoutInputCollaborator(Chip8Fault):
    def __init__(self, opcode: int):
        super().__init__(f"The opcode 0x{opcode:04x} needs a keypad and none is attached")
        self.opcode = opcode
