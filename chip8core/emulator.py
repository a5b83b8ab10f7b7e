"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction, Op, decode
from chip8core.constants import ADDRESS_MASK, INSTRUCTION_SIZE, MEMORY_SIZE, PROGRAM_START
from chip8core.faults import Fault
from chip8core.logging import scan_with_progress
from chip8core.instructions.system import execute_clear_screen, execute_return, execute_invalid
from chip8core.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed,
)
from chip8core.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left,
)
from chip8core.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8core.instructions.display import execute_display
from chip8core.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)

INSTRUCTION_HANDLERS = {
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.JP: execute_jump,
    Op.CALL: execute_call,
    Op.SE_IMM: execute_skip_if_equal_immediate,
    Op.SNE_IMM: execute_skip_if_not_equal_immediate,
    Op.SE_REG: execute_skip_if_equal_register,
    Op.LD_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.LD_REG: execute_alu_set,
    Op.OR: execute_alu_or,
    Op.AND: execute_alu_and,
    Op.XOR: execute_alu_xor,
    Op.ADD_REG: execute_alu_add,
    Op.SUB: execute_alu_sub_xy,
    Op.SHR: execute_alu_shift_right,
    Op.SUBN: execute_alu_sub_yx,
    Op.SHL: execute_alu_shift_left,
    Op.SNE_REG: execute_skip_if_not_equal_register,
    Op.LD_I: execute_set_index,
    Op.JP_V0: execute_jump_with_offset,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.SKP: execute_skip_if_key_pressed,
    Op.SKNP: execute_skip_if_key_not_pressed,
    Op.LD_VX_DT: execute_get_delay_timer,
    Op.LD_KEY: execute_wait_for_key,
    Op.LD_DT_VX: execute_set_delay_timer,
    Op.LD_ST_VX: execute_set_sound_timer,
    Op.ADD_I: execute_add_to_index,
    Op.LD_FONT: execute_font_character,
    Op.BCD: execute_bcd_conversion,
    Op.STORE: execute_store_registers,
    Op.LOAD: execute_load_registers,
    Op.INVALID: execute_invalid,
}

# Indexed by Op value; a missing handler fails here at import time.
_BRANCHES = [INSTRUCTION_HANDLERS[op] for op in Op]


def _dispatch(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    return jax.lax.switch(instruction.op, _BRANCHES, state, instruction)


def _halted(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    return state


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    PC must already point past ``instruction`` (see :func:`fetch`). A faulted
    machine is returned unchanged.
    """
    decoded_instruction = decode(instruction)
    return jax.lax.cond(
        state.fault == int(Fault.NONE),
        _dispatch,
        _halted,
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance PC past it."""
    pc = state.pc.astype(jnp.int32)
    instruction = _pack_u16(state.memory[pc & ADDRESS_MASK], state.memory[(pc + 1) & ADDRESS_MASK])
    return state.replace(pc=(state.pc + INSTRUCTION_SIZE) & ADDRESS_MASK), instruction


def _fetch_and_execute(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return execute(state, instruction)


def _identity(state: EmulatorState) -> EmulatorState:
    return state


def step(state: EmulatorState) -> EmulatorState:
    """Fetch and execute one instruction. Does nothing once the machine has faulted."""
    return jax.lax.cond(state.fault == int(Fault.NONE), _fetch_and_execute, _identity, state)


def run_instruction(state, _):
    return step(state), None


@partial(jax.jit, static_argnames=("num_instructions", "progress"))
def run(state: EmulatorState, num_instructions: int, progress: bool = False) -> EmulatorState:
    """Execute ``num_instructions`` steps in one compiled scan.

    This is a batch helper: it neither throttles nor touches the timers.
    """
    body = run_instruction
    if progress:
        body = scan_with_progress(num_instructions, desc=f"Executing ({num_instructions:,} instructions)")(body)
    state, _ = jax.lax.scan(body, state, jnp.arange(num_instructions))
    return state


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy raw program bytes into memory starting at 0x200."""
    if len(program) > MEMORY_SIZE - PROGRAM_START:
        raise ValueError(
            f"Program is {len(program)} bytes; at most {MEMORY_SIZE - PROGRAM_START} fit above 0x{PROGRAM_START:03X}"
        )
    if not program:
        return state
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array)
    return state.replace(memory=new_memory)


def _check_address(address: int):
    if not 0 <= address < MEMORY_SIZE:
        raise ValueError(f"Address 0x{address:X} outside memory (0x000-0x{MEMORY_SIZE - 1:03X})")


def read_byte(state: EmulatorState, address: int) -> int:
    _check_address(address)
    return int(state.memory[address])


def write_byte(state: EmulatorState, address: int, value: int) -> EmulatorState:
    _check_address(address)
    return state.replace(memory=state.memory.at[address].set(value & 0xFF))


def read_word(state: EmulatorState, address: int) -> int:
    """Read the big-endian 16-bit word at ``address``."""
    _check_address(address)
    return (read_byte(state, address) << 8) | read_byte(state, (address + 1) & ADDRESS_MASK)


def read_timers(state: EmulatorState) -> tuple[int, int]:
    """Return ``(delay, sound)`` timer values."""
    return int(state.delay_timer), int(state.sound_timer)


def write_timers(state: EmulatorState, delay: int = None, sound: int = None) -> EmulatorState:
    """Set either timer; the host owns the 60 Hz decrement."""
    if delay is not None:
        state = state.replace(delay_timer=jnp.asarray(delay & 0xFF, dtype=jnp.uint8))
    if sound is not None:
        state = state.replace(sound_timer=jnp.asarray(sound & 0xFF, dtype=jnp.uint8))
    return state
