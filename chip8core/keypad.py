"""Hexadecimal keypad state, written by the host on key events."""

import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.constants import NUM_KEYS

# Physical key name -> CHIP-8 key, one key per hex digit.
DEFAULT_KEY_MAP = {
    "0": 0x0, "1": 0x1, "2": 0x2, "3": 0x3,
    "4": 0x4, "5": 0x5, "6": 0x6, "7": 0x7,
    "8": 0x8, "9": 0x9, "a": 0xA, "b": 0xB,
    "c": 0xC, "d": 0xD, "e": 0xE, "f": 0xF,
}


def _check_key(key: int):
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key {key} outside keypad range 0x0-0x{NUM_KEYS - 1:X}")


def set_key_state(state: EmulatorState, key: int, down: bool) -> EmulatorState:
    """Record a key-down (``down=True``) or key-up event."""
    _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(bool(down)))


def is_key_down(state: EmulatorState, key: int) -> bool:
    _check_key(key)
    return bool(state.keypad[key])


def toggle_key(state: EmulatorState, key: int) -> EmulatorState:
    """Flip one key between up and down."""
    _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(~state.keypad[key]))


def set_mapped_key(state: EmulatorState, name: str, down: bool, key_map: dict = None) -> EmulatorState:
    """Apply a physical key event through ``key_map``. Unmapped keys are ignored."""
    key_map = DEFAULT_KEY_MAP if key_map is None else key_map
    key = key_map.get(name.lower() if isinstance(name, str) else name)
    if key is None:
        return state
    return set_key_state(state, key, down)


def release_all(state: EmulatorState) -> EmulatorState:
    return state.replace(keypad=jnp.zeros_like(state.keypad))
