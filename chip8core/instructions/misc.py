"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.constants import (
    ADDRESS_MASK, FONT_START, FONT_GLYPH_HEIGHT, INSTRUCTION_SIZE, NUM_REGISTERS,
)


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, wrapping at 4096. VF is not affected."""
    new_i = (jnp.astype(state.I, jnp.int32) + state.V[instruction.x]) & ADDRESS_MASK
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Never blocks. With no key down, PC is moved back onto this instruction and
    ``awaiting_key`` is raised, so the host keeps stepping (and servicing timers,
    rendering, input) until a key goes down. The lowest-numbered down key wins.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(
            V=state.V.at[instruction.x].set(pressed_key),
            awaiting_key=jnp.asarray(False),
        )

    def wait_action(state):
        return state.replace(
            pc=(state.pc - INSTRUCTION_SIZE) & ADDRESS_MASK,
            awaiting_key=jnp.asarray(True),
        )

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX (low nibble)."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.int32)
    font_address = FONT_START + digit * FONT_GLYPH_HEIGHT
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = jnp.astype(state.V[instruction.x], jnp.int32)

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ]).astype(jnp.uint8)

    addresses = (jnp.astype(state.I, jnp.int32) + jnp.arange(3)) & ADDRESS_MASK
    return state.replace(memory=state.memory.at[addresses].set(digits))


def _register_block(state: EmulatorState, instruction: DecodedInstruction):
    """Addresses I..I+15 and the mask selecting V0..VX inclusive."""
    offsets = jnp.arange(NUM_REGISTERS)
    addresses = (jnp.astype(state.I, jnp.int32) + offsets) & ADDRESS_MASK
    return addresses, offsets <= instruction.x


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    addresses, register_mask = _register_block(state, instruction)
    new_values = jnp.where(register_mask, state.V, state.memory[addresses])
    return state.replace(memory=state.memory.at[addresses].set(new_values))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    addresses, register_mask = _register_block(state, instruction)
    return state.replace(V=jnp.where(register_mask, state.memory[addresses], state.V))
