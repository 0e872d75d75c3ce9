"""CHIP-8 emulator state structures."""

from typing import Optional, Sequence, Union

import jax
import jax.numpy as jnp
import numpy as np
from flax.struct import PyTreeNode, field

from chip8vm.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    MEMORY_SIZE, MAX_MEMORY_SIZE, NUM_REGISTERS, NUM_KEYS, NO_KEY,
)
from chip8vm.errors import Fault, ProgramTooLarge

Program = Union[bytes, bytearray, memoryview, Sequence[int], np.ndarray]


class StackState(PyTreeNode):
    """Call stack of return addresses."""
    data: jnp.ndarray
    pointer: jnp.ndarray

    @property
    def capacity(self) -> int:
        return self.data.shape[0]


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    Memory size, framebuffer dimensions and stack depth are carried by the
    array shapes. ``display`` is indexed ``[x, y]``.
    """
    rng: jax.Array
    memory: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    pc: jnp.ndarray
    stack: StackState
    display: jnp.ndarray
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    waiting: jnp.ndarray
    wait_register: jnp.ndarray
    last_key: jnp.ndarray
    draw_flag: jnp.ndarray
    fault: jnp.ndarray
    clip_sprites: bool = field(pytree_node=False, default=True)

    @property
    def memory_size(self) -> int:
        return self.memory.shape[0]

    @property
    def width(self) -> int:
        return self.display.shape[0]

    @property
    def height(self) -> int:
        return self.display.shape[1]

    @property
    def sound_playing(self) -> jnp.ndarray:
        """Level signal: the host should be sounding while this is true."""
        return self.sound_timer > 0


def program_bytes(program: Program) -> np.ndarray:
    """Normalise a program image to a flat uint8 array."""
    if isinstance(program, (bytes, bytearray, memoryview)):
        return np.frombuffer(bytes(program), dtype=np.uint8)
    values = np.asarray(program, dtype=np.int64).ravel()
    if values.size and (values.min() < 0 or values.max() > 0xFF):
        raise ValueError("program bytes must be in the range 0-255")
    return values.astype(np.uint8)


def create_state(
    program: Program = b"",
    rng: Optional[jax.Array] = None,
    *,
    memory_size: int = MEMORY_SIZE,
    width: int = SCREEN_WIDTH,
    height: int = SCREEN_HEIGHT,
    stack_size: Optional[int] = None,
    clip_sprites: bool = True,
) -> EmulatorState:
    """Create initial emulator state with the font and program loaded.

    Args:
        program: Raw machine code, copied to memory at 0x200.
        rng: PRNG key for the random instruction. Defaults to ``PRNGKey(0)``.
        memory_size: Size of the byte memory, at most 0x10000.
        width: Framebuffer width in pixels.
        height: Framebuffer height in pixels.
        stack_size: Capacity of the return-address stack. Defaults to one
            slot per instruction word of memory. A call on a full stack
            records a stack overflow.
        clip_sprites: Skip sprite pixels falling outside the framebuffer
            when true, wrap them around the edges when false.

    Raises:
        ProgramTooLarge: If the program does not fit after 0x200.
        ValueError: For an unaddressable memory size or empty dimensions.
    """
    if memory_size > MAX_MEMORY_SIZE:
        raise ValueError(f"memory_size must be at most 0x{MAX_MEMORY_SIZE:X}, got {memory_size}")
    if width <= 0 or height <= 0:
        raise ValueError(f"framebuffer dimensions must be positive, got {width}x{height}")
    if stack_size is None:
        stack_size = memory_size // 2
    if stack_size <= 0:
        raise ValueError(f"stack_size must be positive, got {stack_size}")

    rom = program_bytes(program)
    if PROGRAM_START + rom.size > memory_size:
        raise ProgramTooLarge(rom.size, max(memory_size - PROGRAM_START, 0))

    memory = np.zeros(memory_size, dtype=np.uint8)
    memory[FONT_START:FONT_START + len(FONT_DATA)] = FONT_DATA
    memory[PROGRAM_START:PROGRAM_START + rom.size] = rom

    if rng is None:
        rng = jax.random.PRNGKey(0)

    return EmulatorState(
        rng=rng,
        memory=jnp.asarray(memory),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        stack=StackState(
            data=jnp.zeros(stack_size, dtype=jnp.uint16),
            pointer=jnp.zeros((), dtype=jnp.int32),
        ),
        display=jnp.zeros((width, height), dtype=jnp.uint8),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        waiting=jnp.asarray(False),
        wait_register=jnp.zeros((), dtype=jnp.uint8),
        last_key=jnp.asarray(NO_KEY, dtype=jnp.int8),
        draw_flag=jnp.asarray(False),
        fault=jnp.asarray(Fault.NONE.value, dtype=jnp.uint8),
        clip_sprites=clip_sprites,
    )
