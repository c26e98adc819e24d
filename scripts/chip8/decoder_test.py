import unittest

from chip8.decoder import Instruction, Op, decode
from chip8.disassembler import render

# (mask, pattern, op) straight from the published opcode table
OPCODE_TABLE = [
    (0xFFFF, 0x00E0, Op.CLS),
    (0xFFFF, 0x00EE, Op.RET),
    (0xF000, 0x1000, Op.JP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SE_BYTE),
    (0xF000, 0x4000, Op.SNE_BYTE),
    (0xF00F, 0x5000, Op.SE_REG),
    (0xF000, 0x6000, Op.LD_BYTE),
    (0xF000, 0x7000, Op.ADD_BYTE),
    (0xF00F, 0x8000, Op.LD_REG),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD_REG),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),
    (0xF00F, 0x9000, Op.SNE_REG),
    (0xF000, 0xA000, Op.LD_I),
    (0xF000, 0xB000, Op.JP_V0),
    (0xF000, 0xC000, Op.RND),
    (0xF000, 0xD000, Op.DRW),
    (0xF0FF, 0xE09E, Op.SKP),
    (0xF0FF, 0xE0A1, Op.SKNP),
    (0xF0FF, 0xF007, Op.LD_VX_DT),
    (0xF0FF, 0xF00A, Op.LD_VX_K),
    (0xF0FF, 0xF015, Op.LD_DT_VX),
    (0xF0FF, 0xF018, Op.LD_ST_VX),
    (0xF0FF, 0xF01E, Op.ADD_I),
    (0xF0FF, 0xF029, Op.LD_F),
    (0xF0FF, 0xF033, Op.LD_B),
    (0xF0FF, 0xF055, Op.LD_MEM_REGS),
    (0xF0FF, 0xF065, Op.LD_REGS_MEM),
]


class TestDecoding(unittest.TestCase):
    def test_operand_fields(self):
        self.assertEqual(decode(0xD12F),
                         Instruction(op=Op.DRW, opcode=0xD12F, x=1, y=2, n=0xF, kk=0x2F, nnn=0x12F))

    def test_known_opcodes(self):
        cases = {
            0x00E0: Op.CLS,
            0x00EE: Op.RET,
            0x1ABC: Op.JP,
            0x2ABC: Op.CALL,
            0x6A7B: Op.LD_BYTE,
            0x8AB4: Op.ADD_REG,
            0x8AB7: Op.SUBN,
            0x8ABE: Op.SHL,
            0xEA9E: Op.SKP,
            0xFA65: Op.LD_REGS_MEM,
        }
        for opcode, op in cases.items():
            with self.subTest(opcode=hex(opcode)):
                self.assertEqual(decode(opcode).op, op)

    def test_machine_subroutines_do_not_decode(self):
        for opcode in (0x0000, 0x0123, 0x00E1, 0x00EF, 0x0FFF):
            with self.subTest(opcode=hex(opcode)):
                self.assertIsNone(decode(opcode))

    def test_undefined_sub_opcodes(self):
        for opcode in (0x8008, 0x800F, 0xE09F, 0xE0A2, 0xF000, 0xF0FF, 0x5121, 0x912F):
            with self.subTest(opcode=hex(opcode)):
                self.assertIsNone(decode(opcode))

    def test_out_of_range(self):
        self.assertIsNone(decode(-1))
        self.assertIsNone(decode(0x10000))

    def test_decoding_is_deterministic(self):
        self.assertEqual(decode(0xC3FF), decode(0xC3FF))

    def test_whole_opcode_space(self):
        """every opcode decodes to the variant the table assigns it, or fails when the table has none"""
        decoded = 0
        for opcode in range(0x10000):
            matches = [op for mask, pattern, op in OPCODE_TABLE if opcode & mask == pattern]
            self.assertLessEqual(len(matches), 1)
            ins = decode(opcode)
            if matches:
                self.assertIsNotNone(ins, hex(opcode))
                self.assertEqual(ins.op, matches[0], hex(opcode))
                self.assertEqual(ins.opcode, opcode)
                self.assertTrue(render(ins))
                decoded += 1
            else:
                self.assertIsNone(ins, hex(opcode))
        self.assertEqual({op for _, _, op in OPCODE_TABLE}, set(Op))
        self.assertGreater(decoded, 0)


if __name__ == "__main__":
    unittest.main()
