"""Tests for display operations (DXYN)."""

import jax.numpy as jnp
from chip8vm import execute
from conftest import setup_sprite_in_memory, set_registers


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        state = fresh_state

        # Simple 2x2 box sprite
        sprite = [0xC0, 0xC0]  # 11000000, 11000000
        state = setup_sprite_in_memory(state, 0x300, sprite)

        # Set coordinates: V0=10, V1=5
        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0x6105)  # V1 = 5
        state = execute(state, 0xA300)  # I = 0x300

        # Draw sprite: D012 (draw at V0,V1 with height 2)
        state = execute(state, 0xD012)

        assert state.display[10, 5] == 1  # Top-left
        assert state.display[11, 5] == 1  # Top-right
        assert state.display[10, 6] == 1  # Bottom-left
        assert state.display[11, 6] == 1  # Bottom-right
        assert state.display[12, 5] == 0  # Outside sprite
        assert jnp.sum(state.display) == 4

        assert state.V[15] == 0
        assert state.draw_flag
        assert state.pc == 0x208

    def test_collision_detection(self, fresh_state):
        """Test collision flag when sprite overlaps existing pixels."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80])
        state = set_registers(state, V0=20, V1=10, I=0x400)

        state = execute(state, 0xD011)
        assert state.display[20, 10] == 1
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert state.display[20, 10] == 0  # Pixel erased by XOR
        assert state.V[15] == 1

    def test_draw_idempotence(self, fresh_state):
        """A full 8x1 row drawn twice sets then clears columns 0-7."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF])
        state = set_registers(state, V0=0, V1=0, I=0x300)

        state = execute(state, 0xD011)
        assert jnp.all(state.display[0:8, 0] == 1)
        assert jnp.sum(state.display) == 8
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert not jnp.any(state.display)
        assert state.V[15] == 1

    def test_xor_behavior(self, fresh_state):
        """Overlapping sprites XOR; partial overlap still counts as collision."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xF0, 0x3C])
        state = set_registers(state, V0=0, V1=0, I=0x300)

        state = execute(state, 0xD011)  # 11110000
        state = execute(state, 0xA301)
        state = execute(state, 0xD011)  # 00111100

        row = [int(state.display[x, 0]) for x in range(8)]
        assert row == [1, 1, 0, 0, 1, 1, 0, 0]
        assert state.V[15] == 1

    def test_sprite_bits_msb_first(self, fresh_state):
        """Bit 7 of each byte is the leftmost pixel."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x81])
        state = set_registers(state, V0=4, V1=2, I=0x300)

        state = execute(state, 0xD011)

        assert state.display[4, 2] == 1
        assert state.display[11, 2] == 1
        assert jnp.sum(state.display) == 2

    def test_zero_height_draws_nothing(self, fresh_state):
        """DXY0 - No rows, VF cleared, redraw still requested."""
        state = set_registers(fresh_state, VF=1, I=0x000)

        state = execute(state, 0xD010)

        assert not jnp.any(state.display)
        assert state.V[15] == 0
        assert state.draw_flag

    def test_font_glyph(self, fresh_state):
        """Draw the built-in glyph for 0 from address 0."""
        state = set_registers(fresh_state, V0=0, V1=0, I=0x000)

        state = execute(state, 0xD015)

        # 0xF0, 0x90, 0x90, 0x90, 0xF0
        assert [int(state.display[x, 0]) for x in range(4)] == [1, 1, 1, 1]
        assert [int(state.display[x, 1]) for x in range(4)] == [1, 0, 0, 1]
        assert jnp.sum(state.display) == 14


class TestSpriteEdges:
    """Test pixels falling outside the framebuffer."""

    def test_clipped_at_right_edge(self, fresh_state):
        """Columns past the right edge are dropped, not wrapped."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF])
        state = set_registers(state, V0=60, V1=0, I=0x300)

        state = execute(state, 0xD011)

        assert jnp.all(state.display[60:64, 0] == 1)
        assert jnp.sum(state.display) == 4
        assert state.display[0, 1] == 0

    def test_clipped_at_bottom_edge(self, fresh_state):
        """Rows past the bottom edge are dropped."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80, 0x80, 0x80])
        state = set_registers(state, V0=0, V1=31, I=0x300)

        state = execute(state, 0xD013)

        assert state.display[0, 31] == 1
        assert jnp.sum(state.display) == 1

    def test_origin_off_screen(self, fresh_state):
        """An origin beyond the screen draws nothing when clipping."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF])
        state = set_registers(state, V0=200, V1=100, I=0x300)

        state = execute(state, 0xD011)

        assert not jnp.any(state.display)
        assert state.V[15] == 0

    def test_wraps_when_clipping_disabled(self, wrapping_state):
        """With clip_sprites=False pixels wrap around both edges."""
        state = setup_sprite_in_memory(wrapping_state, 0x300, [0xFF, 0xFF])
        state = set_registers(state, V0=60, V1=31, I=0x300)

        state = execute(state, 0xD012)

        assert jnp.all(state.display[60:64, 31] == 1)
        assert jnp.all(state.display[0:4, 31] == 1)
        assert jnp.all(state.display[60:64, 0] == 1)
        assert jnp.all(state.display[0:4, 0] == 1)
        assert jnp.sum(state.display) == 16

    def test_wrapping_origin_reduced_modulo_screen(self, wrapping_state):
        """Origin 64 + 3 lands on column 3."""
        state = setup_sprite_in_memory(wrapping_state, 0x300, [0x80])
        state = set_registers(state, V0=67, V1=33, I=0x300)

        state = execute(state, 0xD011)

        assert state.display[3, 1] == 1
        assert jnp.sum(state.display) == 1
