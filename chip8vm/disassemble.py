"""CHIP-8 disassembler.

Renders instruction words with the conventional Cowgod mnemonics, using
the same opcode table the emulator dispatches on.
"""

from typing import Iterator, Tuple

from chip8vm.constants import PROGRAM_START
from chip8vm.decode import Op, lookup_op
from chip8vm.state import Program, program_bytes


# Format strings receive x, y, n, kk and nnn as keyword arguments.
MNEMONICS = {
    Op.CLEAR_SCREEN: "CLS",
    Op.RETURN: "RET",
    Op.MACHINE_CALL: "SYS ${nnn:03X}",
    Op.JUMP: "JP ${nnn:03X}",
    Op.CALL: "CALL ${nnn:03X}",
    Op.SKIP_IF_EQUAL_IMMEDIATE: "SE V{x:X}, #{kk:02X}",
    Op.SKIP_IF_NOT_EQUAL_IMMEDIATE: "SNE V{x:X}, #{kk:02X}",
    Op.SKIP_IF_EQUAL_REGISTER: "SE V{x:X}, V{y:X}",
    Op.SET_IMMEDIATE: "LD V{x:X}, #{kk:02X}",
    Op.ADD_IMMEDIATE: "ADD V{x:X}, #{kk:02X}",
    Op.SET_REGISTER: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD_REGISTER: "ADD V{x:X}, V{y:X}",
    Op.SUB_XY: "SUB V{x:X}, V{y:X}",
    Op.SHIFT_RIGHT: "SHR V{x:X}",
    Op.SUB_YX: "SUBN V{x:X}, V{y:X}",
    Op.SHIFT_LEFT: "SHL V{x:X}",
    Op.SKIP_IF_NOT_EQUAL_REGISTER: "SNE V{x:X}, V{y:X}",
    Op.SET_INDEX: "LD I, ${nnn:03X}",
    Op.JUMP_WITH_OFFSET: "JP V0, ${nnn:03X}",
    Op.RANDOM: "RND V{x:X}, #{kk:02X}",
    Op.DRAW: "DRW V{x:X}, V{y:X}, #{n:X}",
    Op.SKIP_IF_KEY: "SKP V{x:X}",
    Op.SKIP_IF_NOT_KEY: "SKNP V{x:X}",
    Op.GET_DELAY_TIMER: "LD V{x:X}, DT",
    Op.WAIT_FOR_KEY: "LD V{x:X}, K",
    Op.SET_DELAY_TIMER: "LD DT, V{x:X}",
    Op.SET_SOUND_TIMER: "LD ST, V{x:X}",
    Op.ADD_TO_INDEX: "ADD I, V{x:X}",
    Op.FONT_CHARACTER: "LD F, V{x:X}",
    Op.STORE_BCD: "LD B, V{x:X}",
    Op.STORE_REGISTERS: "LD [I], V{x:X}",
    Op.LOAD_REGISTERS: "LD V{x:X}, [I]",
}


def disassemble(instruction: int) -> str:
    """Mnemonic text for one 16-bit instruction word."""
    instruction &= 0xFFFF
    op = lookup_op(instruction)
    if op is Op.UNKNOWN:
        return f"UNKNOWN ${instruction:04X}"
    return MNEMONICS[op].format(
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        kk=instruction & 0x00FF,
        nnn=instruction & 0x0FFF,
    )


def disassemble_program(program: Program, origin: int = PROGRAM_START) -> Iterator[Tuple[int, int, str]]:
    """Yield ``(address, word, text)`` for each instruction slot of a program image.

    A trailing odd byte is reported as a word with a zero low byte.
    """
    data = program_bytes(program)
    for offset in range(0, len(data), 2):
        high = int(data[offset])
        low = int(data[offset + 1]) if offset + 1 < len(data) else 0
        word = (high << 8) | low
        yield origin + offset, word, disassemble(word)
