"""CHIP-8 instruction decoding."""

from enum import IntEnum

import jax.numpy as jnp
import numpy as np
from chex import dataclass


class Op(IntEnum):
    """Instruction shapes of the original CHIP-8 set."""
    UNKNOWN = 0
    CLEAR_SCREEN = 1                 # 00E0
    RETURN = 2                       # 00EE
    MACHINE_CALL = 3                 # 0NNN
    JUMP = 4                         # 1NNN
    CALL = 5                         # 2NNN
    SKIP_IF_EQUAL_IMMEDIATE = 6      # 3XKK
    SKIP_IF_NOT_EQUAL_IMMEDIATE = 7  # 4XKK
    SKIP_IF_EQUAL_REGISTER = 8       # 5XYN
    SET_IMMEDIATE = 9                # 6XKK
    ADD_IMMEDIATE = 10               # 7XKK
    SET_REGISTER = 11                # 8XY0
    OR = 12                          # 8XY1
    AND = 13                         # 8XY2
    XOR = 14                         # 8XY3
    ADD_REGISTER = 15                # 8XY4
    SUB_XY = 16                      # 8XY5
    SHIFT_RIGHT = 17                 # 8XY6
    SUB_YX = 18                      # 8XY7
    SHIFT_LEFT = 19                  # 8XYE
    SKIP_IF_NOT_EQUAL_REGISTER = 20  # 9XY0
    SET_INDEX = 21                   # ANNN
    JUMP_WITH_OFFSET = 22            # BNNN
    RANDOM = 23                      # CXKK
    DRAW = 24                        # DXYN
    SKIP_IF_KEY = 25                 # EX9E
    SKIP_IF_NOT_KEY = 26             # EXA1
    GET_DELAY_TIMER = 27             # FX07
    WAIT_FOR_KEY = 28                # FX0A
    SET_DELAY_TIMER = 29             # FX15
    SET_SOUND_TIMER = 30             # FX18
    ADD_TO_INDEX = 31                # FX1E
    FONT_CHARACTER = 32              # FX29
    STORE_BCD = 33                   # FX33
    STORE_REGISTERS = 34             # FX55
    LOAD_REGISTERS = 35              # FX65


# (mask, value, op); the first matching pattern wins.
OPCODE_PATTERNS = (
    (0xFFFF, 0x00E0, Op.CLEAR_SCREEN),
    (0xFFFF, 0x00EE, Op.RETURN),
    (0xF000, 0x0000, Op.MACHINE_CALL),
    (0xF000, 0x1000, Op.JUMP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SKIP_IF_EQUAL_IMMEDIATE),
    (0xF000, 0x4000, Op.SKIP_IF_NOT_EQUAL_IMMEDIATE),
    (0xF000, 0x5000, Op.SKIP_IF_EQUAL_REGISTER),
    (0xF000, 0x6000, Op.SET_IMMEDIATE),
    (0xF000, 0x7000, Op.ADD_IMMEDIATE),
    (0xF00F, 0x8000, Op.SET_REGISTER),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD_REGISTER),
    (0xF00F, 0x8005, Op.SUB_XY),
    (0xF00F, 0x8006, Op.SHIFT_RIGHT),
    (0xF00F, 0x8007, Op.SUB_YX),
    (0xF00F, 0x800E, Op.SHIFT_LEFT),
    (0xF00F, 0x9000, Op.SKIP_IF_NOT_EQUAL_REGISTER),
    (0xF000, 0xA000, Op.SET_INDEX),
    (0xF000, 0xB000, Op.JUMP_WITH_OFFSET),
    (0xF000, 0xC000, Op.RANDOM),
    (0xF000, 0xD000, Op.DRAW),
    (0xF0FF, 0xE09E, Op.SKIP_IF_KEY),
    (0xF0FF, 0xE0A1, Op.SKIP_IF_NOT_KEY),
    (0xF0FF, 0xF007, Op.GET_DELAY_TIMER),
    (0xF0FF, 0xF00A, Op.WAIT_FOR_KEY),
    (0xF0FF, 0xF015, Op.SET_DELAY_TIMER),
    (0xF0FF, 0xF018, Op.SET_SOUND_TIMER),
    (0xF0FF, 0xF01E, Op.ADD_TO_INDEX),
    (0xF0FF, 0xF029, Op.FONT_CHARACTER),
    (0xF0FF, 0xF033, Op.STORE_BCD),
    (0xF0FF, 0xF055, Op.STORE_REGISTERS),
    (0xF0FF, 0xF065, Op.LOAD_REGISTERS),
)


def _build_opcode_table() -> np.ndarray:
    words = np.arange(0x10000, dtype=np.uint32)
    table = np.full(0x10000, Op.UNKNOWN.value, dtype=np.int32)
    for mask, value, op in reversed(OPCODE_PATTERNS):
        table[(words & mask) == value] = op.value
    return table


# Op index for every 16-bit word.
OPCODE_TABLE = _build_opcode_table()
_OPCODE_TABLE = jnp.asarray(OPCODE_TABLE)


def lookup_op(instruction: int) -> Op:
    """Host-side Op lookup for a concrete instruction word."""
    return Op(int(OPCODE_TABLE[int(instruction) & 0xFFFF]))


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: jnp.ndarray
    kind: jnp.ndarray  # Op index
    x: jnp.ndarray     # Second nibble (VX register)
    y: jnp.ndarray     # Third nibble (VY register)
    n: jnp.ndarray     # Fourth nibble (4-bit immediate)
    nn: jnp.ndarray    # Last byte (8-bit immediate)
    nnn: jnp.ndarray   # Last 12 bits (12-bit address)


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    instruction = jnp.asarray(instruction, dtype=jnp.uint16)
    return DecodedInstruction(
        raw=instruction,
        kind=_OPCODE_TABLE[instruction],
        x=jnp.astype((instruction & 0x0F00) >> 8, jnp.uint8),
        y=jnp.astype((instruction & 0x00F0) >> 4, jnp.uint8),
        n=jnp.astype(instruction & 0x000F, jnp.uint8),
        nn=jnp.astype(instruction & 0x00FF, jnp.uint8),
        nnn=instruction & 0x0FFF,
    )
