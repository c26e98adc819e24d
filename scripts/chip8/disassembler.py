import argparse
import logging
import sys

from chip8.decoder import Op, decode
from chip8.faults import DecodeFailure
from chip8.machine import ROM_START_ADDRESS

log = logging.getLogger(__name__)


# ********** MNEMONIC FORMATS, FILLED WITH THE INSTRUCTION'S OPERAND FIELDS
FORMATS = {
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.JP: "JP {target}",
    Op.CALL: "CALL {target}",
    Op.SE_BYTE: "SE V{x:X}, 0x{kk:02x}",
    Op.SNE_BYTE: "SNE V{x:X}, 0x{kk:02x}",
    Op.SE_REG: "SE V{x:X}, V{y:X}",
    Op.LD_BYTE: "LD V{x:X}, 0x{kk:02x}",
    Op.ADD_BYTE: "ADD V{x:X}, 0x{kk:02x}",
    Op.LD_REG: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD_REG: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHR: "SHR V{x:X}, V{y:X}",
    Op.SUBN: "SUBN V{x:X}, V{y:X}",
    Op.SHL: "SHL V{x:X}, V{y:X}",
    Op.SNE_REG: "SNE V{x:X}, V{y:X}",
    Op.LD_I: "LD I, 0x{nnn:03x}",
    Op.JP_V0: "JP V0, 0x{nnn:03x}",
    Op.RND: "RND V{x:X}, 0x{kk:02x}",
    Op.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Op.SKP: "SKP V{x:X}",
    Op.SKNP: "SKNP V{x:X}",
    Op.LD_VX_DT: "LD V{x:X}, DT",
    Op.LD_VX_K: "LD V{x:X}, K",
    Op.LD_DT_VX: "LD DT, V{x:X}",
    Op.LD_ST_VX: "LD ST, V{x:X}",
    Op.ADD_I: "ADD I, V{x:X}",
    Op.LD_F: "LD F, V{x:X}",
    Op.LD_B: "LD B, V{x:X}",
    Op.LD_MEM_REGS: "LD [I], V{x:X}",
    Op.LD_REGS_MEM: "LD V{x:X}, [I]",
}


def render(instruction, labels=None) -> str:
    """mnemonic text of a decoded instruction, jump/call targets are replaced by their label if known"""
    target = f"0x{instruction.nnn:03x}"
    if labels and instruction.nnn in labels:
        target = labels[instruction.nnn]
    return FORMATS[instruction.op].format(
        target=target,
        x=instruction.x,
        y=instruction.y,
        n=instruction.n,
        kk=instruction.kk,
        nnn=instruction.nnn,
    )


def _words(image, start):
    for offset in range(0, len(image) - 1, 2):
        yield start + offset, image[offset] << 8 | image[offset + 1]


def find_labels(image, start=ROM_START_ADDRESS):
    """map every jump target to addr_<N> and every call target to sub_<N>, N being the decimal address"""
    end = start + len(image)
    labels = {}
    for _, opcode in _words(image, start):
        instruction = decode(opcode)
        if instruction is None or instruction.op not in (Op.JP, Op.CALL):
            continue
        target = instruction.nnn
        if not start <= target < end or (target - start) % 2:
            continue    # no line of the listing would carry the label
        if instruction.op == Op.CALL:
            labels[target] = f"sub_{target}"
        else:
            labels.setdefault(target, f"addr_{target}")
    return labels


def disassemble(image, start=ROM_START_ADDRESS, strict=False):
    """render a raw program image, one line per 16-bit word plus a line for each label"""
    labels = find_labels(image, start)
    lines = ["start:"]
    for address, opcode in _words(image, start):
        if address in labels:
            lines.append(f"{labels[address]}:")
        instruction = decode(opcode)
        if instruction is None:
            if strict:
                raise DecodeFailure(opcode)
            log.debug("no instruction at 0x%04x, rendering 0x%04x as data", address, opcode)
            text = f"DW 0x{opcode:04x}"
        else:
            text = render(instruction, labels)
        lines.append(f"0x{opcode:04x}|\t{text}")
    if len(image) % 2:
        lines.append(f"0x{image[-1]:02x}|\tDB 0x{image[-1]:02x}")
    return lines


def get_args(argv=None):
    parser = argparse.ArgumentParser(description="Disassemble a CHIP-8 program image")
    parser.add_argument("image", metavar="IMAGE_FILE", help="raw program image")
    parser.add_argument("--strict", action="store_true", help="fail on words that are not instructions")
    parser.add_argument("--start", type=lambda s: int(s, 0), default=ROM_START_ADDRESS,
                        help="load address of the image (default: 0x200)")
    return parser.parse_args(argv)


def main(argv=None):
    args = get_args(argv)
    try:
        with open(args.image, mode='rb') as f:
            image = f.read()
    except OSError as e:
        print(f"ERROR: Unable to open {args.image}: {e.strerror}", file=sys.stderr)
        return 1
    try:
        lines = disassemble(image, start=args.start, strict=args.strict)
    except DecodeFailure as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    print("\n".join(lines))
    return 0


if __name__ == "__main__":
    sys.exit(main())
