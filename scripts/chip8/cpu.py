# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#
# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html#quirk6
#
# MASTERING CHIP-8
# https://github.com/mattmikolay/chip-8/wiki/Mastering-CHIP%E2%80%908

import logging
from dataclasses import dataclass

from chip8.decoder import Op, decode
from chip8.disassembler import render
from chip8.faults import DecodeFailure, MemoryOutOfBounds, UnsupportedWithoutInputCollaborator
from chip8.machine import FLAG_REGISTER, FONT_GLYPH_SIZE, Machine
from chip8.rng import RandomSource

log = logging.getLogger(__name__)

SHIFT_MODES = ("vy", "one", "copy_vy")


@dataclass
class Quirks:
    """dialect choices where CHIP-8 interpreters historically disagree

    shift: "vy" shifts Vx by the amount held in Vy, "one" shifts Vx by one and
    ignores Vy, "copy_vy" stores Vy shifted by one into Vx (COSMAC VIP).
    logic_resets_vf: OR/AND/XOR also zero VF (COSMAC VIP).
    """
    shift: str = "vy"
    logic_resets_vf: bool = False

    def __post_init__(self):
        if self.shift not in SHIFT_MODES:
            raise ValueError(f"Unknown shift mode {self.shift!r}, expected one of {SHIFT_MODES}")


# ******************** CPU SECTION
class CPU:
    """executes instructions against a Machine

    Every handler returns True when it redirected the program counter itself,
    in which case step() leaves pc alone instead of moving to the next opcode.
    """

    def __init__(self, machine=None, rng=None, keypad=None, quirks=None):
        self.machine = machine if machine is not None else Machine()
        self.rng = rng if rng is not None else RandomSource()
        self.keypad = keypad
        self.quirks = quirks if quirks is not None else Quirks()
        self.instructions = {
            Op.CLS: self._clear_screen,
            Op.RET: self._return,
            Op.JP: self._jump,
            Op.CALL: self._call_addr,
            Op.SE_BYTE: self._skip_if_eq,
            Op.SNE_BYTE: self._skip_if_not_eq,
            Op.SE_REG: self._skip_if_eq_regs,
            Op.LD_BYTE: self._set_vk,
            Op.ADD_BYTE: self._add_to_vk,
            Op.LD_REG: self._set_vx_to_vy,
            Op.OR: self._set_vx_or_vy,
            Op.AND: self._set_vx_and_vy,
            Op.XOR: self._set_vx_xor_vy,
            Op.ADD_REG: self._add_vx_vy,
            Op.SUB: self._sub_vx_vy,
            Op.SHR: self._shr,
            Op.SUBN: self._subn_vx_vy,
            Op.SHL: self._shl,
            Op.SNE_REG: self._skip_if_not_eq_regs,
            Op.LD_I: self._set_idx,
            Op.JP_V0: self._jump_plus,
            Op.RND: self._random_byte_and,
            Op.DRW: self._to_screen,
            Op.SKP: self._skip_if_pressed,
            Op.SKNP: self._skip_if_not_pressed,
            Op.LD_VX_DT: self._set_vx_dt,
            Op.LD_VX_K: self._wait_keypress,
            Op.LD_DT_VX: self._set_dt_vx,
            Op.LD_ST_VX: self._set_st,
            Op.ADD_I: self._add_to_idx,
            Op.LD_F: self._select_char,
            Op.LD_B: self._bcd_repr,
            Op.LD_MEM_REGS: self._store_vregs,
            Op.LD_REGS_MEM: self._load_vregs,
        }

    def __str__(self):
        devices = f"KEYPAD:{self.keypad}" if self.keypad is not None else "KEYPAD:none"
        return f"{self.machine}\n{devices} | QUIRKS:{self.quirks}"

    @property
    def v_regs(self):
        return self.machine.v_regs

    def _goto_next_instruction(self):
        self.machine.pc += 0x2

    def _require_keypad(self, ins):
        if self.keypad is None:
            raise UnsupportedWithoutInputCollaborator(ins.opcode)
        return self.keypad

    # ********** FLOW CONTROL
    def _clear_screen(self, ins):
        self.machine.fb.clear()

    def _return(self, ins):
        """return from a subroutine, step() then moves past the CALL that was popped"""
        self.machine.pc = self.machine.stack.pop()

    def _jump(self, ins):
        self.machine.pc = ins.nnn
        return True

    def _call_addr(self, ins):
        """push the address of this CALL and jump to the subroutine"""
        self.machine.stack.push(self.machine.pc)
        self.machine.pc = ins.nnn
        return True

    def _jump_plus(self, ins):
        self.machine.pc = (self.v_regs[0x0] + ins.nnn) & 0xFFFF
        return True

    def _skip_if_eq(self, ins):
        if self.v_regs[ins.x] == ins.kk:
            self._goto_next_instruction()

    def _skip_if_not_eq(self, ins):
        if self.v_regs[ins.x] != ins.kk:
            self._goto_next_instruction()

    def _skip_if_eq_regs(self, ins):
        if self.v_regs[ins.x] == self.v_regs[ins.y]:
            self._goto_next_instruction()

    def _skip_if_not_eq_regs(self, ins):
        if self.v_regs[ins.x] != self.v_regs[ins.y]:
            self._goto_next_instruction()

    # ********** REGISTERS AND ARITHMETIC
    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.v_regs[ins.x] = ins.kk

    def _add_to_vk(self, ins):
        """add to the value already present in one of the variable registers, VF untouched"""
        self.v_regs[ins.x] = (self.v_regs[ins.x] + ins.kk) & 0xFF

    def _set_vx_to_vy(self, ins):
        self.v_regs[ins.x] = self.v_regs[ins.y]

    def _set_vx_or_vy(self, ins):
        self.v_regs[ins.x] |= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[FLAG_REGISTER] = 0

    def _set_vx_and_vy(self, ins):
        self.v_regs[ins.x] &= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[FLAG_REGISTER] = 0

    def _set_vx_xor_vy(self, ins):
        self.v_regs[ins.x] ^= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[FLAG_REGISTER] = 0

    def _add_vx_vy(self, ins):
        """set Vx to Vx + Vy, VF = 1 on carry"""
        total = self.v_regs[ins.x] + self.v_regs[ins.y]
        self.v_regs[ins.x] = total & 0xFF
        self.v_regs[FLAG_REGISTER] = 1 if total > 0xFF else 0

    def _subtract(self, x, minuend, subtrahend):
        self.v_regs[x] = (minuend - subtrahend) & 0xFF
        self.v_regs[FLAG_REGISTER] = 1 if minuend >= subtrahend else 0    # 1 means no borrow

    def _sub_vx_vy(self, ins):
        """set Vx to Vx - Vy"""
        self._subtract(ins.x, self.v_regs[ins.x], self.v_regs[ins.y])

    def _subn_vx_vy(self, ins):
        """set Vx to Vy - Vx"""
        self._subtract(ins.x, self.v_regs[ins.y], self.v_regs[ins.x])

    def _shift_operands(self, ins):
        if self.quirks.shift == "copy_vy":
            return self.v_regs[ins.y], 1
        if self.quirks.shift == "one":
            return self.v_regs[ins.x], 1
        return self.v_regs[ins.x], self.v_regs[ins.y]

    def _shr(self, ins):
        source, amount = self._shift_operands(ins)
        lsb = source & 0x1
        self.v_regs[ins.x] = (source >> amount) & 0xFF
        self.v_regs[FLAG_REGISTER] = lsb

    def _shl(self, ins):
        source, amount = self._shift_operands(ins)
        msb = (source & 0x80) >> 7
        self.v_regs[ins.x] = (source << amount) & 0xFF
        self.v_regs[FLAG_REGISTER] = msb

    def _random_byte_and(self, ins):
        self.v_regs[ins.x] = self.rng() & ins.kk

    # ********** INDEX REGISTER AND MEMORY
    def _set_idx(self, ins):
        self.machine.idx = ins.nnn

    def _add_to_idx(self, ins):
        """set I = I + Vx, no carry flag"""
        self.machine.idx = (self.machine.idx + self.v_regs[ins.x]) & 0xFFFF

    def _select_char(self, ins):
        """set I to location of sprite for the hex digit in the low nibble of Vx"""
        self.machine.idx = self.machine.font_base + (self.v_regs[ins.x] & 0xF) * FONT_GLYPH_SIZE

    def _bcd_repr(self, ins):
        """hundreds digit of Vx in memory at I, the tens digit at I+1, the ones digit at I+2"""
        value = self.v_regs[ins.x]
        self.machine.mem.write(self.machine.idx, [value // 100, value // 10 % 10, value % 10])

    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        count = ins.x + 1
        self.machine.mem.write(self.machine.idx, self.v_regs[:count])
        self.machine.idx = (self.machine.idx + count) & 0xFFFF

    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        count = ins.x + 1
        self.v_regs[:count] = list(self.machine.mem.read(self.machine.idx, count))
        self.machine.idx = (self.machine.idx + count) & 0xFFFF

    # ********** DISPLAY
    def _to_screen(self, ins):
        """XOR an n-byte sprite read from I onto (Vx, Vy), VF = 1 if a lit pixel got erased"""
        sprite = self.machine.mem.read(self.machine.idx, ins.n)
        x, y = self.v_regs[ins.x], self.v_regs[ins.y]
        collision = False
        for row, sprite_byte in enumerate(sprite):
            for col in range(8):
                if sprite_byte & (0x80 >> col) and self.machine.fb.flip(x + col, y + row):
                    collision = True
        self.v_regs[FLAG_REGISTER] = 1 if collision else 0

    # ********** TIMERS
    def _set_vx_dt(self, ins):
        self.v_regs[ins.x] = self.machine.dt

    def _set_dt_vx(self, ins):
        self.machine.dt = self.v_regs[ins.x]

    def _set_st(self, ins):
        self.machine.st = self.v_regs[ins.x]

    # ********** KEYPAD
    def _skip_if_pressed(self, ins):
        keypad = self._require_keypad(ins)
        if keypad[self.v_regs[ins.x] & 0xF]:
            self._goto_next_instruction()

    def _skip_if_not_pressed(self, ins):
        keypad = self._require_keypad(ins)
        if not keypad[self.v_regs[ins.x] & 0xF]:
            self._goto_next_instruction()

    def _wait_keypress(self, ins):
        """store the first queued key in Vx, stay on this instruction while no key is queued"""
        keypad = self._require_keypad(ins)
        if keypad.untouched():
            return True
        self.v_regs[ins.x] = keypad.first()

    # ********** EXECUTION
    def execute(self, ins) -> bool:
        """apply one decoded instruction, return True if it moved pc on its own"""
        return bool(self.instructions[ins.op](ins))

    def fetch(self) -> int:
        """read the big-endian opcode at pc (each instruction is two bytes long)"""
        pc = self.machine.pc
        if pc < 0 or pc + 1 >= len(self.machine.mem):
            raise MemoryOutOfBounds(pc)
        return self.machine.mem[pc] << 8 | self.machine.mem[pc + 1]

    def step(self):
        """retire exactly one instruction and return it, timers are left to the caller"""
        pc = self.machine.pc
        opcode = self.fetch()
        ins = decode(opcode)
        if ins is None:
            raise DecodeFailure(opcode)
        if log.isEnabledFor(logging.DEBUG):
            log.debug("mem_addr: 0x%04x    instruction: %s", pc, render(ins))
        if not self.execute(ins):
            self._goto_next_instruction()
        return ins
