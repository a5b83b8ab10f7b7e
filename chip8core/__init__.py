"""CHIP-8 interpreter core in JAX."""

from chip8core.state import EmulatorState, StackState, create_state, set_flag
from chip8core.emulator import (
    execute, fetch, step, run, load_program,
    read_byte, write_byte, read_word, read_timers, write_timers,
)
from chip8core.decode import (
    DecodedInstruction, Op, addr12, classify, decode, disassemble, imm8, nibble, reg_x, reg_y,
)
from chip8core.faults import (
    Fault, MachineFault, StackOverflowError, StackUnderflowError, InvalidOpcodeError,
    check_fault, is_halted,
)
from chip8core.keypad import (
    DEFAULT_KEY_MAP, set_key_state, is_key_down, toggle_key, set_mapped_key, release_all,
)
from chip8core.framebuffer import pixel_at, set_pixel, clear_display, display_rows
from chip8core.logging import ConsoleLogger, EmulatorLogger
from chip8core.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "set_flag",
    "fetch",
    "execute",
    "step",
    "run",
    "load_program",
    "read_byte",
    "write_byte",
    "read_word",
    "read_timers",
    "write_timers",
    "DecodedInstruction",
    "Op",
    "decode",
    "classify",
    "addr12",
    "reg_x",
    "reg_y",
    "imm8",
    "nibble",
    "disassemble",
    "Fault",
    "MachineFault",
    "StackOverflowError",
    "StackUnderflowError",
    "InvalidOpcodeError",
    "check_fault",
    "is_halted",
    "DEFAULT_KEY_MAP",
    "set_key_state",
    "is_key_down",
    "toggle_key",
    "set_mapped_key",
    "release_all",
    "pixel_at",
    "set_pixel",
    "clear_display",
    "display_rows",
    "ConsoleLogger",
    "EmulatorLogger",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
