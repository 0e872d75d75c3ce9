"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER, SPRITE_WIDTH
from chip8vm.instructions import advance


def blit_sprite(
    display: jnp.ndarray,
    memory: jnp.ndarray,
    index: jnp.ndarray,
    origin_x: jnp.ndarray,
    origin_y: jnp.ndarray,
    height: jnp.ndarray,
    clip: bool = True,
) -> tuple[jnp.ndarray, jnp.ndarray]:
    """XOR an 8-pixel-wide sprite read from ``memory[index:index + height]`` onto the display.

    Sprite bytes are read most significant bit first. With ``clip`` set,
    pixels landing outside the display are dropped; otherwise destination
    coordinates wrap around the edges.

    Returns:
        The new display and whether any set pixel was cleared.
    """
    width, screen_height = display.shape
    xx, yy = jnp.meshgrid(jnp.arange(width), jnp.arange(screen_height), indexing='ij')

    col_offset = xx - jnp.astype(origin_x, jnp.int32)
    row_offset = yy - jnp.astype(origin_y, jnp.int32)
    if not clip:
        col_offset = col_offset % width
        row_offset = row_offset % screen_height

    in_sprite = (
        (col_offset >= 0) & (col_offset < SPRITE_WIDTH)
        & (row_offset >= 0) & (row_offset < jnp.astype(height, jnp.int32))
    )

    row = jnp.where(in_sprite, row_offset, 0)
    col = jnp.where(in_sprite, col_offset, 0)
    sprite_bytes = memory[jnp.astype(index, jnp.int32) + row]
    bits = (sprite_bytes >> jnp.astype(7 - col, jnp.uint8)) & 1
    sprite = jnp.where(in_sprite, bits, 0).astype(display.dtype)

    collision = jnp.any((display == 1) & (sprite == 1))
    return display ^ sprite, collision


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    display, collision = blit_sprite(
        state.display,
        state.memory,
        state.I,
        state.V[instruction.x],
        state.V[instruction.y],
        instruction.n,
        clip=state.clip_sprites,
    )
    return advance(state.replace(
        display=display,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
        draw_flag=jnp.asarray(True),
    ))
