from chip8.faults import MemoryOutOfBounds, StackOverflow, StackUnderflow


# ******************** STATIC SECTION
C8_FONTS = [0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
            0x20, 0x60, 0x20, 0x20, 0x70,  # 1
            0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
            0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
            0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
            0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
            0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
            0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
            0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
            0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
            0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
            0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
            0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
            0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
            0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
            0xF0, 0x80, 0xF0, 0x80, 0x80]  # F

FONT_BASE = 0x000
FONT_GLYPH_SIZE = 5             # each character font is made of 5 bytes
ROM_START_ADDRESS = 0x200
MEMORY_SIZE = 4096
REGISTER_COUNT = 16
STACK_SIZE = 16
FLAG_REGISTER = 0xF
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32


# ******************** MEMORY SECTION
# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self, capacity=STACK_SIZE):
        self.capacity = capacity
        self.addr_list = []

    def __len__(self):
        return len(self.addr_list)

    def __iter__(self):
        """iterate from the bottom of the stack to its top"""
        return iter(self.addr_list)

    def __repr__(self):
        return f"Stack({', '.join(f'0x{a:04x}' for a in self.addr_list)})"

    def push(self, address: int):
        if len(self.addr_list) >= self.capacity:
            raise StackOverflow(self.capacity)
        self.addr_list.append(address)

    def pop(self) -> int:
        if not self.addr_list:
            raise StackUnderflow()
        return self.addr_list.pop()

    def peek(self) -> int:
        if not self.addr_list:
            raise StackUnderflow()
        return self.addr_list[-1]

    def clear(self):
        self.addr_list.clear()


# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self, size=MEMORY_SIZE):
        self.inner = bytearray(size)

    def __len__(self):
        return len(self.inner)

    def _check(self, address, length=1):
        """every address in [address, address+length) must live inside the memory"""
        if address < 0 or address >= len(self.inner):
            raise MemoryOutOfBounds(address)
        if address + length > len(self.inner):
            raise MemoryOutOfBounds(address, length)

    def __getitem__(self, address):
        self._check(address)
        return self.inner[address]

    def __setitem__(self, address, value):
        self._check(address)
        self.inner[address] = value

    def read(self, address: int, length: int) -> bytes:
        if length == 0:
            return b""
        self._check(address, length)
        return bytes(self.inner[address:address + length])

    def write(self, address: int, data):
        if len(data) == 0:
            return
        self._check(address, len(data))
        self.inner[address:address + len(data)] = bytes(data)

    def clear(self):
        self.inner[:] = bytes(len(self.inner))


# ******************** DISPLAY SECTION
class Framebuffer:
    """monochrome pixel buffer, both coordinates wrap around the screen edges"""

    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = [False] * h * w

    def _index(self, x, y):
        return (x % self.w) + (y % self.h) * self.w

    def __getitem__(self, xy):
        x, y = xy
        return self.buffer[self._index(x, y)]

    def __setitem__(self, xy, value):
        x, y = xy
        self.buffer[self._index(x, y)] = bool(value)

    def __len__(self):
        return len(self.buffer)

    def flip(self, x, y) -> bool:
        """XOR a lit pixel onto (x, y), return True if the pixel was on and got erased"""
        i = self._index(x, y)
        erased = self.buffer[i]
        self.buffer[i] = not erased
        return erased

    def clear(self):
        self.buffer = [False] * self.h * self.w

    def rows(self):
        for y in range(self.h):
            yield self.buffer[y * self.w:(y + 1) * self.w]

    def __str__(self):
        return "\n".join("".join("1" if p else "0" for p in row) for row in self.rows())


# ******************** MACHINE STATE SECTION
class Machine:
    """everything a CHIP-8 program can observe: memory, registers, stack, timers and screen"""

    def __init__(self, font=C8_FONTS, font_base=FONT_BASE):
        self.font = bytes(font)
        self.font_base = font_base
        self.mem = Memory()
        self.stack = Stack()
        self.fb = Framebuffer()
        self.v_regs = [0] * REGISTER_COUNT
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # the I register, used for indirect memory access
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.reset()

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | VARIABLE_REGISTERS:{self.v_regs}"
        return f"{registers}\nSTACK:{self.stack!r}\nTIMERS: DT={self.dt} ST={self.st}"

    def reset(self):
        self.v_regs = [0] * REGISTER_COUNT
        self.fb.clear()
        self.stack.clear()
        self.mem.clear()
        self.pc = ROM_START_ADDRESS
        self.idx = 0
        self.dt = 0
        self.st = 0
        self.mem.write(self.font_base, self.font)

    def load_program(self, program: bytes):
        """reset the machine and copy a raw program image at ROM_START_ADDRESS"""
        self.reset()
        self.mem.write(ROM_START_ADDRESS, program)

    def tick_timers(self):
        """count both timers down by one, meant to be called by the driver at 60Hz"""
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1

    def dump(self) -> str:
        lines = [f"PC:\t0x{self.pc:04x}", f"I:\t0x{self.idx:04x}", ""]
        lines += [f"V{i:02d}: 0x{v:02x}" for i, v in enumerate(self.v_regs)]
        lines += ["", f"delayTimer:\t{self.dt}", f"soundTimer:\t{self.st}", ""]
        lines.append("Stack: " + " ".join(f"0x{a:04x}" for a in self.stack))
        lines += ["", "Frame buffer:", str(self.fb)]
        return "\n".join(lines) + "\n"
