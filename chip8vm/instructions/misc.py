"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FONT_START, FONT_GLYPH_SIZE, NUM_REGISTERS
from chip8vm.instructions import advance


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return advance(state.replace(V=state.V.at[instruction.x].set(state.delay_timer)))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Open the key-wait latch on VX.

    Nothing blocks here. The next step stores the key the host delivers
    through ``press_key`` into VX.
    """
    return advance(state.replace(waiting=jnp.asarray(True), wait_register=instruction.x))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return advance(state.replace(delay_timer=state.V[instruction.x]))


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return advance(state.replace(sound_timer=state.V[instruction.x]))


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register (16-bit, VF untouched)."""
    new_i = state.I + jnp.astype(state.V[instruction.x], jnp.uint16)
    return advance(state.replace(I=new_i))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_GLYPH_SIZE
    return advance(state.replace(I=jnp.astype(font_address, jnp.uint16)))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
    new_memory = state.memory.at[indices].set(digits, mode="drop")
    return advance(state.replace(memory=new_memory))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    current_memory_values = state.memory[base_indices]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values, mode="drop")
    return advance(state.replace(memory=new_memory))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    memory_values = state.memory[base_indices]
    new_V = jnp.where(register_mask, memory_values, state.V)
    return advance(state.replace(V=new_V))
