"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import pop
from chip8vm.instructions import advance


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unmatched opcode: nothing changes, PC included."""
    return state


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return advance(state.replace(display=jnp.zeros_like(state.display)))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine to the instruction after the call."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address + 2)


def execute_machine_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """0NNN - Machine call, treated as a reset of V, I, timers and display plus a jump.

    There are no native routines to call; memory, stack and keys survive.
    """
    return state.replace(
        pc=jnp.astype(instruction.nnn, jnp.uint16),
        V=jnp.zeros_like(state.V),
        I=jnp.zeros_like(state.I),
        delay_timer=jnp.zeros_like(state.delay_timer),
        sound_timer=jnp.zeros_like(state.sound_timer),
        display=jnp.zeros_like(state.display),
    )
