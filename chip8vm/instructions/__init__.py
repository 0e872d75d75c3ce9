"""CHIP-8 instruction handlers, one ``(state, instruction) -> state`` function per Op."""

from chip8vm.state import EmulatorState


def advance(state: EmulatorState, amount: int = 2) -> EmulatorState:
    """Move the program counter past the current instruction."""
    return state.replace(pc=state.pc + amount)
