from chip8.cpu import CPU, Quirks
from chip8.decoder import Instruction, Op, decode
from chip8.faults import (
    Chip8Fault, DecodeFailure, MemoryOutOfBounds,
    StackOverflow, StackUnderflow, UnsupportedWithoutInputCollaborator,
)
from chip8.keypad import Keypad
from chip8.machine import Machine
from chip8.rng import FixedSequence, RandomSource
