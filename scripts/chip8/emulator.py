"""pygame front end: window, keyboard, timers and the emulation loop around the CPU"""

import argparse
import logging
import sys

import os
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "no welcome message")   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_0, K_1, K_2, K_3,
    K_4, K_5, K_6, K_7,
    K_8, K_9, K_a, K_b,
    K_c, K_d, K_e, K_f,
)

from chip8.cpu import CPU, SHIFT_MODES, Quirks
from chip8.decoder import Op
from chip8.faults import Chip8Fault
from chip8.keypad import Keypad
from chip8.machine import Machine, SCREEN_HEIGHT, SCREEN_WIDTH
from chip8.rng import RandomSource

log = logging.getLogger(__name__)


# ******************** STATIC SECTION
KEY_MAPPINGS = {
    K_0: 0x0,
    K_1: 0x1,
    K_2: 0x2,
    K_3: 0x3,
    K_4: 0x4,
    K_5: 0x5,
    K_6: 0x6,
    K_7: 0x7,
    K_8: 0x8,
    K_9: 0x9,
    K_a: 0xA,
    K_b: 0xB,
    K_c: 0xC,
    K_d: 0xD,
    K_e: 0xE,
    K_f: 0xF,
}


def env_flag(name):
    """numeric values count as set when >= 1, words like yes/true/on as set, anything else as unset"""
    value = os.getenv(name, "0").strip()
    try:
        return int(value) >= 1
    except ValueError:
        return value.lower() in ("true", "yes", "on")


DEBUG = env_flag("DEBUG")
SPEED = 300                     # instructions per second
TIMER_FREQUENCY = 60            # timers count down at 60Hz
SCALE = 15
BLUE = pygame.Color(80, 69, 155, 255)
LIGHT_BLUE = pygame.Color(136, 126, 203, 255)
REDRAW_OPS = (Op.CLS, Op.DRW)


# ******************** I/O SECTION
class Screen:
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
        )
        self.surface.fill(self.background)
        self._background_pixel = self.surface.map_rgb(self.background)

    def read_pixel(self, x, y):
        """return 1 if pixel is ON, return 0 if pixel is OFF"""
        p = self.surface.get_at_mapped((x * self.scale, y * self.scale))
        return 0 if p == self._background_pixel else 1

    def write_pixel(self, x, y, color):
        """paint one cell, visible only after refresh()"""
        pygame.draw.rect(
            self.surface,
            self.background if color == 0 else self.foreground,
            (x * self.scale, y * self.scale, self.scale, self.scale)
        )

    def render(self, framebuffer):
        """paint the whole framebuffer and show it"""
        for y, row in enumerate(framebuffer.rows()):
            for x, lit in enumerate(row):
                self.write_pixel(x, y, 1 if lit else 0)
        self.refresh()

    @staticmethod
    def refresh():
        pygame.display.flip()


def load_rom(machine, path):
    """load ROM file from the given path into a freshly reset machine"""
    with open(path, mode='rb') as f:
        rom = f.read()
    machine.load_program(rom)
    log.info("The ROM at path %s has been loaded successfully (%d bytes)", path, len(rom))


def handle_events(keypad):
    """feed key presses to the keypad and drop released keys, return False when the user asked to quit"""
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key in KEY_MAPPINGS:
                keypad[KEY_MAPPINGS[event.key]] = True     # register keypress
        elif event.type == pygame.KEYUP and event.key in KEY_MAPPINGS:
            keypad[KEY_MAPPINGS[event.key]] = False
    return True


def run(cpu, screen, speed=SPEED):
    """emulation loop: one instruction per tick, timers at TIMER_FREQUENCY whatever the speed"""
    clock = pygame.time.Clock()
    timer_debt = 0      # a timer tick is due every `speed` units
    screen.render(cpu.machine.fb)
    while handle_events(cpu.keypad):
        clock.tick(speed)
        ins = cpu.step()
        timer_debt += TIMER_FREQUENCY
        while timer_debt >= speed:
            timer_debt -= speed
            cpu.machine.tick_timers()
        if ins.op in REDRAW_OPS:
            screen.render(cpu.machine.fb)


# ******************** ENTRY POINT SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a CHIP-8 program")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("--speed", type=int, default=SPEED, help="instructions per second")
    parser.add_argument("--scale", type=int, default=SCALE, help="size in pixels of a CHIP-8 pixel")
    parser.add_argument("--shift", choices=SHIFT_MODES, default="vy", help="SHR/SHL dialect")
    parser.add_argument("--logic-resets-vf", action="store_true", help="OR/AND/XOR zero VF")
    parser.add_argument("--seed", type=int, default=None, help="seed for the RND instruction")
    parser.add_argument("--debug", action="store_true", default=DEBUG, help="trace every instruction")
    return parser.parse_args(argv)


def main(argv=None):
    args = get_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    machine = Machine()
    try:
        load_rom(machine, args.file)
    except OSError as e:
        sys.exit(f"Unable to open {args.file}: {e.strerror}")
    except Chip8Fault as e:
        sys.exit(f"Unable to load {args.file}: {e}")
    cpu = CPU(
        machine,
        rng=RandomSource(args.seed),
        keypad=Keypad(),
        quirks=Quirks(shift=args.shift, logic_resets_vf=args.logic_resets_vf),
    )
    # pygame initialization
    pygame.init()
    pygame.display.set_caption(os.path.basename(args.file))
    try:
        run(cpu, Screen(s=args.scale), speed=args.speed)
    except Chip8Fault as e:
        log.error("%s (pc=0x%04x)", e, machine.pc)
        print(machine.dump())
        sys.exit(f"********** THE EMULATOR CRASHED WITH THE FOLLOWING STATE\n{cpu}")
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
