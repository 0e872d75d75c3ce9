"""CHIP-8 register load and immediate operations."""

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.instructions import advance


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return advance(state.replace(V=state.V.at[instruction.x].set(instruction.nn)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX, wrapping at 256. VF is not touched."""
    return advance(state.replace(V=state.V.at[instruction.x].add(instruction.nn)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return advance(state.replace(I=jnp.astype(instruction.nnn, jnp.uint16)))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random byte & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.bits(subkey, dtype=jnp.uint8)
    return advance(state.replace(V=state.V.at[instruction.x].set(random_value & instruction.nn), rng=key))
