"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def wrapping_state():
    """Provide a fresh state whose sprites wrap around the screen edges."""
    return create_state(clip_sprites=False)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=0x10, I=0x300)``."""
    for name, value in registers.items():
        if name == "I":
            state = state.replace(I=jnp.asarray(value, dtype=jnp.uint16))
        else:
            state = state.replace(V=state.V.at[int(name[1:], 16)].set(value))
    return state
