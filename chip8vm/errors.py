"""CHIP-8 fault codes and the exceptions raised for them."""

from enum import IntEnum
from typing import Optional


class Fault(IntEnum):
    """Fault code recorded in ``EmulatorState.fault`` by the jitted core."""
    NONE = 0
    UNKNOWN_OPCODE = 1
    STACK_UNDERFLOW = 2
    STACK_OVERFLOW = 3
    MEMORY_FAULT = 4


class Chip8Error(Exception):
    """Base class for every error raised by chip8vm."""


class ProgramTooLarge(Chip8Error, ValueError):
    """Program image does not fit in memory after the load offset."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"program of {size} bytes does not fit in the {capacity} bytes available after 0x200"
        )


class MachineFault(Chip8Error):
    """Execution fault at a given program counter."""

    fault = Fault.NONE
    reason = "machine fault"

    def __init__(self, pc: int, opcode: Optional[int] = None, detail: str = ""):
        self.pc = pc
        self.opcode = opcode
        self.detail = detail
        where = f"at 0x{pc:03X}"
        if opcode is not None:
            where += f" (opcode 0x{opcode:04X})"
        message = f"{self.reason} {where}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnknownOpcode(MachineFault):
    fault = Fault.UNKNOWN_OPCODE
    reason = "unknown opcode"


class StackUnderflow(MachineFault):
    fault = Fault.STACK_UNDERFLOW
    reason = "return with empty call stack"


class StackOverflow(MachineFault):
    fault = Fault.STACK_OVERFLOW
    reason = "call stack full"


class MemoryFault(MachineFault):
    fault = Fault.MEMORY_FAULT
    reason = "memory access out of bounds"


FAULT_ERRORS = {
    error.fault: error
    for error in (UnknownOpcode, StackUnderflow, StackOverflow, MemoryFault)
}
