"""Tests for register load, add and index operations."""

import jax
import jax.numpy as jnp
from chip8core import execute, create_state
from conftest import set_registers


class TestBasicMemory:
    """Test basic register operations."""

    def test_set_basic(self, fresh_state):
        """6XNN - Set VX = NN."""
        state = execute(fresh_state, 0x600A)  # V0 = 0xA
        assert state.V[0] == 0xA

    def test_add_basic(self, fresh_state):
        """7XNN - Add NN to VX."""
        state = set_registers(fresh_state, V1=0x10)
        state = execute(state, 0x7105)  # V1 += 5
        assert state.V[1] == 0x15

    def test_add_wraps_without_flag(self, fresh_state):
        """7XNN - Overflow wraps and leaves VF alone."""
        state = set_registers(fresh_state, V1=0xFF, VF=0x33)
        state = execute(state, 0x7102)
        assert state.V[1] == 0x01
        assert state.V[15] == 0x33

    def test_add_does_not_spill_into_neighbours(self, fresh_state):
        state = set_registers(fresh_state, V1=0xF0, V2=0x07)
        state = execute(state, 0x71F0)
        assert state.V[1] == 0xE0
        assert state.V[2] == 0x07

    def test_add_immediate_all_values(self):
        """7XNN matches (x + nn) mod 256 for every x and nn."""
        def add_immediate(x, nn):
            state = create_state().replace(V=jnp.zeros(16, dtype=jnp.uint8).at[3].set(x))
            return execute(state, 0x7300 | nn).V[3]

        batched = jax.jit(jax.vmap(add_immediate, in_axes=(0, None)))
        xs = jnp.arange(256, dtype=jnp.uint8)
        for nn in range(256):
            expected = (jnp.arange(256) + nn) % 256
            assert jnp.array_equal(batched(xs, nn), expected), f"NN = {nn:02X}"


class TestIndexRegister:
    """Test I register operations."""

    def test_set_index_basic(self, fresh_state):
        """ANNN - Set I register to NNN."""
        state = execute(fresh_state, 0xA123)
        assert state.I == 0x123

    def test_set_index_zero(self, fresh_state):
        state = execute(fresh_state, 0xA123)
        state = execute(state, 0xA000)
        assert state.I == 0x000

    def test_set_index_maximum(self, fresh_state):
        """ANNN - Set I register to maximum 12-bit value."""
        state = execute(fresh_state, 0xAFFF)
        assert state.I == 0xFFF

    def test_set_index_common_values(self, fresh_state):
        """ANNN - Test common memory addresses."""
        for value in [0x200, 0x300, 0x500, 0x600, 0xA00, 0xEA0]:
            state = execute(fresh_state, 0xA000 | value)
            assert state.I == value, f"Failed to set I to 0x{value:03X}"


class TestRandom:
    """Test random number generation."""

    def test_random_zero_mask(self, fresh_state):
        """CXNN - Random AND with 0x00 should always be 0."""
        state = execute(fresh_state, 0xC000)
        assert state.V[0] == 0

    def test_random_bit_mask(self, fresh_state):
        """CXNN - Random AND with specific mask."""
        state = execute(fresh_state, 0xC20F)
        assert 0 <= state.V[2] <= 15

    def test_random_advances_key(self, fresh_state):
        state = execute(fresh_state, 0xC0FF)
        assert not jnp.array_equal(state.rng, fresh_state.rng)

    def test_random_is_deterministic_per_seed(self):
        first = execute(create_state(jax.random.PRNGKey(7)), 0xC0FF)
        second = execute(create_state(jax.random.PRNGKey(7)), 0xC0FF)
        assert first.V[0] == second.V[0]

    def test_random_preserves_state(self, fresh_state):
        """CXNN - Other registers are untouched."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99)
        state = execute(state, 0xA300)

        state = execute(state, 0xC0FF)

        assert state.V[1] == 0x42
        assert state.V[2] == 0x99
        assert state.I == 0x300

    def test_random_mask_patterns(self, fresh_state):
        """CXNN - Results never have bits outside the mask."""
        state = fresh_state
        for i, mask in enumerate([0x01, 0x03, 0x07, 0x80]):
            reg = i + 6
            state = execute(state, 0xC000 | (reg << 8) | mask)
            assert int(state.V[reg]) & ~mask == 0, f"Mask 0x{mask:02X} failed"
