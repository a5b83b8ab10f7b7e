"""Read access to the 64x32 monochrome display for host renderers."""

import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.constants import SCREEN_WIDTH, SCREEN_HEIGHT


def _check_pixel(x: int, y: int):
    if not (0 <= x < SCREEN_WIDTH and 0 <= y < SCREEN_HEIGHT):
        raise ValueError(f"Pixel ({x}, {y}) outside {SCREEN_WIDTH}x{SCREEN_HEIGHT} display")


def pixel_at(state: EmulatorState, x: int, y: int) -> bool:
    """Whether the pixel at column ``x``, row ``y`` is on."""
    _check_pixel(x, y)
    return bool(state.display[x, y])


def set_pixel(state: EmulatorState, x: int, y: int, on: bool = True) -> EmulatorState:
    _check_pixel(x, y)
    return state.replace(display=state.display.at[x, y].set(bool(on)))


def clear_display(state: EmulatorState) -> EmulatorState:
    return state.replace(display=jnp.zeros_like(state.display))


def display_rows(state: EmulatorState) -> list[str]:
    """Display as text, one string per row, ``#`` for on and ``.`` for off."""
    pixels = jnp.asarray(state.display).T.tolist()
    return ["".join("#" if pixel else "." for pixel in row) for row in pixels]
