"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8core.state import EmulatorState, set_flag
from chip8core.decode import DecodedInstruction
from chip8core.constants import (
    ADDRESS_MASK, SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MAX_SPRITE_HEIGHT,
)

# Row/column offsets of every bit a sprite can have. Rows beyond N are masked.
rows, cols = jnp.meshgrid(
    jnp.arange(MAX_SPRITE_HEIGHT + 1), jnp.arange(SPRITE_WIDTH), indexing='ij'
)


def sprite_mask(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Boolean (64, 32) grid of the pixels a DXYN sprite toggles.

    Both axes wrap independently, so parts of a sprite crossing an edge
    reappear on the opposite side.
    """
    origin_x = jnp.astype(state.V[instruction.x], jnp.int32)
    origin_y = jnp.astype(state.V[instruction.y], jnp.int32)

    addresses = (jnp.astype(state.I, jnp.int32) + rows) & ADDRESS_MASK
    sprite_bytes = jnp.astype(state.memory[addresses], jnp.int32)
    bits = (((sprite_bytes >> (7 - cols)) & 1) == 1) & (rows < instruction.n)

    xs = (origin_x + cols) % SCREEN_WIDTH
    ys = (origin_y + rows) % SCREEN_HEIGHT
    return jnp.zeros_like(state.display).at[xs, ys].set(bits)


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw N-row sprite from memory[I] at (VX, VY), VF = collision."""
    sprite = sprite_mask(state, instruction)
    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=set_flag(state.V, collision)
    )
