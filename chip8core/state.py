"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode, field

from chip8core.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS, FLAG_REGISTER,
)


def _zeros(shape, dtype):
    return field(default_factory=lambda: jnp.zeros(shape, dtype=dtype))


class StackState(PyTreeNode):
    """Return-address stack for subroutine calls."""
    data: jnp.ndarray = _zeros(STACK_SIZE, jnp.uint16)
    pointer: jnp.ndarray = _zeros((), jnp.int32)


class EmulatorState(PyTreeNode):
    """Complete architectural state of one CHIP-8 machine.

    The display is indexed ``display[x, y]`` with shape (64, 32). ``fault`` holds
    a :class:`chip8core.faults.Fault` code; any non-zero value halts execution.
    ``awaiting_key`` is set while an FX0A instruction is waiting for input.
    """
    rng: jax.Array
    memory: jnp.ndarray = _zeros(MEMORY_SIZE, jnp.uint8)
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = _zeros((SCREEN_WIDTH, SCREEN_HEIGHT), jnp.bool_)
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = _zeros((), jnp.uint8)
    sound_timer: jnp.ndarray = _zeros((), jnp.uint8)
    keypad: jnp.ndarray = _zeros(NUM_KEYS, jnp.bool_)
    V: jnp.ndarray = _zeros(NUM_REGISTERS, jnp.uint8)
    I: jnp.ndarray = _zeros((), jnp.uint16)
    awaiting_key: jnp.ndarray = _zeros((), jnp.bool_)
    fault: jnp.ndarray = _zeros((), jnp.uint8)
    fault_instruction: jnp.ndarray = _zeros((), jnp.uint16)


def create_state(rng: jax.Array = None) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    if rng is None:
        rng = jax.random.PRNGKey(0)
    state = EmulatorState(rng)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def set_flag(V: jnp.ndarray, flag) -> jnp.ndarray:
    """Write a status flag (0 or 1) into VF."""
    return V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8) & 1)
