"""turn raw 16-bit opcodes into Instruction values

Dispatch is on the high nibble first. The 0x8 family is told apart by its low
nibble, the 0xE and 0xF families by their low byte. 0NNN machine subroutines
are not supported and never decode.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class Op(Enum):
    CLS = auto()
    RET = auto()
    JP = auto()
    CALL = auto()
    SE_BYTE = auto()
    SNE_BYTE = auto()
    SE_REG = auto()
    LD_BYTE = auto()
    ADD_BYTE = auto()
    LD_REG = auto()
    OR = auto()
    AND = auto()
    XOR = auto()
    ADD_REG = auto()
    SUB = auto()
    SHR = auto()
    SUBN = auto()
    SHL = auto()
    SNE_REG = auto()
    LD_I = auto()
    JP_V0 = auto()
    RND = auto()
    DRW = auto()
    SKP = auto()
    SKNP = auto()
    LD_VX_DT = auto()
    LD_VX_K = auto()
    LD_DT_VX = auto()
    LD_ST_VX = auto()
    ADD_I = auto()
    LD_F = auto()
    LD_B = auto()
    LD_MEM_REGS = auto()
    LD_REGS_MEM = auto()


@dataclass(frozen=True)
class Instruction:
    op: Op
    opcode: int
    x: int = 0      # VX register index
    y: int = 0      # VY register index
    n: int = 0      # 4-bit immediate (sprite length)
    kk: int = 0     # 8-bit immediate
    nnn: int = 0    # 12-bit address


# families identified by the high nibble alone
_SIMPLE_OPS = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_BYTE,
    0x4: Op.SNE_BYTE,
    0x6: Op.LD_BYTE,
    0x7: Op.ADD_BYTE,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}

# 5XY0 and 9XY0, only defined with a zero low nibble
_REG_COMPARE_OPS = {
    0x5: Op.SE_REG,
    0x9: Op.SNE_REG,
}

_ALU_OPS = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_KEY_OPS = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_MISC_OPS = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I,
    0x29: Op.LD_F,
    0x33: Op.LD_B,
    0x55: Op.LD_MEM_REGS,
    0x65: Op.LD_REGS_MEM,
}


def _lookup(opcode: int) -> Optional[Op]:
    family = (opcode & 0xF000) >> 12
    if family == 0x0:
        if opcode == 0x00E0:
            return Op.CLS
        if opcode == 0x00EE:
            return Op.RET
        return None
    if family in _SIMPLE_OPS:
        return _SIMPLE_OPS[family]
    if family in _REG_COMPARE_OPS:
        return _REG_COMPARE_OPS[family] if opcode & 0x000F == 0 else None
    if family == 0x8:
        return _ALU_OPS.get(opcode & 0x000F)
    if family == 0xE:
        return _KEY_OPS.get(opcode & 0x00FF)
    return _MISC_OPS.get(opcode & 0x00FF)


def decode(opcode: int) -> Optional[Instruction]:
    """return the Instruction encoded by opcode, or None if it isn't a CHIP-8 instruction"""
    if not 0 <= opcode <= 0xFFFF:
        return None
    op = _lookup(opcode)
    if op is None:
        return None
    return Instruction(
        op=op,
        opcode=opcode,
        x=(opcode & 0x0F00) >> 8,
        y=(opcode & 0x00F0) >> 4,
        n=opcode & 0x000F,
        kk=opcode & 0x00FF,
        nnn=opcode & 0x0FFF,
    )
