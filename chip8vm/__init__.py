"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import (
    execute, fetch, step, run_cycles, checked_step, raise_for_fault, clear_fault,
    check_fault, needs_input, press_key, release_key,
)
from chip8vm.decode import DecodedInstruction, Op, decode
from chip8vm.disassemble import disassemble, disassemble_program
from chip8vm.errors import (
    Fault, Chip8Error, MachineFault, UnknownOpcode, StackUnderflow,
    StackOverflow, MemoryFault, ProgramTooLarge,
)
from chip8vm.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run_cycles",
    "checked_step",
    "raise_for_fault",
    "clear_fault",
    "check_fault",
    "needs_input",
    "press_key",
    "release_key",
    "DecodedInstruction",
    "Op",
    "decode",
    "disassemble",
    "disassemble_program",
    "Fault",
    "Chip8Error",
    "MachineFault",
    "UnknownOpcode",
    "StackUnderflow",
    "StackOverflow",
    "MemoryFault",
    "ProgramTooLarge",
    "PROGRAM_START",
    "FONT_START",
    "FONT_DATA",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "NUM_KEYS",
    "FLAG_REGISTER",
]
