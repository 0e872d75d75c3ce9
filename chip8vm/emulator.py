"""Main CHIP-8 emulator execution engine.

``step`` and ``run_cycles`` are pure and jitted; faults are recorded in
``state.fault``. ``checked_step`` and ``raise_for_fault`` are the host-side
layer that turns a recorded fault into an exception.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import Op, decode
from chip8vm.constants import NO_KEY, NUM_KEYS
from chip8vm.errors import Fault, FAULT_ERRORS
from chip8vm.stack import is_empty, is_full
from chip8vm.instructions.system import no_op, execute_clear_screen, execute_return, execute_machine_call
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8vm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)
from chip8vm.logging import EmulatorLogger


INSTRUCTION_HANDLERS = {
    Op.UNKNOWN: no_op,
    Op.CLEAR_SCREEN: execute_clear_screen,
    Op.RETURN: execute_return,
    Op.MACHINE_CALL: execute_machine_call,
    Op.JUMP: execute_jump,
    Op.CALL: execute_call,
    Op.SKIP_IF_EQUAL_IMMEDIATE: execute_skip_if_equal_immediate,
    Op.SKIP_IF_NOT_EQUAL_IMMEDIATE: execute_skip_if_not_equal_immediate,
    Op.SKIP_IF_EQUAL_REGISTER: execute_skip_if_equal_register,
    Op.SET_IMMEDIATE: execute_set,
    Op.ADD_IMMEDIATE: execute_add,
    Op.SET_REGISTER: execute_alu_set,
    Op.OR: execute_alu_or,
    Op.AND: execute_alu_and,
    Op.XOR: execute_alu_xor,
    Op.ADD_REGISTER: execute_alu_add,
    Op.SUB_XY: execute_alu_sub_xy,
    Op.SHIFT_RIGHT: execute_alu_shift_right,
    Op.SUB_YX: execute_alu_sub_yx,
    Op.SHIFT_LEFT: execute_alu_shift_left,
    Op.SKIP_IF_NOT_EQUAL_REGISTER: execute_skip_if_not_equal_register,
    Op.SET_INDEX: execute_set_index,
    Op.JUMP_WITH_OFFSET: execute_jump_with_offset,
    Op.RANDOM: execute_random,
    Op.DRAW: execute_display,
    Op.SKIP_IF_KEY: execute_skip_if_key,
    Op.SKIP_IF_NOT_KEY: execute_skip_if_not_key,
    Op.GET_DELAY_TIMER: execute_get_delay_timer,
    Op.WAIT_FOR_KEY: execute_wait_for_key,
    Op.SET_DELAY_TIMER: execute_set_delay_timer,
    Op.SET_SOUND_TIMER: execute_set_sound_timer,
    Op.ADD_TO_INDEX: execute_add_to_index,
    Op.FONT_CHARACTER: execute_font_character,
    Op.STORE_BCD: execute_bcd_conversion,
    Op.STORE_REGISTERS: execute_store_registers,
    Op.LOAD_REGISTERS: execute_load_registers,
}

# Branch i of the switch handles Op(i); a missing handler fails at import.
_BRANCHES = [INSTRUCTION_HANDLERS[op] for op in Op]

logger = EmulatorLogger(name="chip8vm", log_level="WARNING")


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> jnp.ndarray:
    """Read the big-endian instruction word at PC. The state is not modified."""
    pc = jnp.astype(state.pc, jnp.int32)
    return _pack_u16(state.memory[pc], state.memory[pc + 1])


@jax.jit
def execute(state: EmulatorState, instruction) -> EmulatorState:
    """Execute single CHIP-8 instruction, without fault checks or timer ticks."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.kind, _BRANCHES, state, decoded_instruction)


def check_fault(state: EmulatorState, instruction) -> jnp.ndarray:
    """Fault code the instruction at PC would raise, ``Fault.NONE`` when it is safe to run."""
    decoded = decode(instruction)
    kind = decoded.kind
    size = state.memory_size
    pc = jnp.astype(state.pc, jnp.int32)
    index = jnp.astype(state.I, jnp.int32)

    fetch_fault = pc + 1 >= size
    memory_fault = (
        ((kind == int(Op.DRAW)) & (decoded.n > 0) & (index + jnp.astype(decoded.n, jnp.int32) > size))
        | ((kind == int(Op.STORE_BCD)) & (index + 3 > size))
        | (((kind == int(Op.STORE_REGISTERS)) | (kind == int(Op.LOAD_REGISTERS)))
           & (index + jnp.astype(decoded.x, jnp.int32) + 1 > size))
    )

    return jnp.select(
        [
            fetch_fault,
            kind == int(Op.UNKNOWN),
            (kind == int(Op.RETURN)) & is_empty(state.stack),
            (kind == int(Op.CALL)) & is_full(state.stack),
            memory_fault,
        ],
        [
            int(Fault.MEMORY_FAULT),
            int(Fault.UNKNOWN_OPCODE),
            int(Fault.STACK_UNDERFLOW),
            int(Fault.STACK_OVERFLOW),
            int(Fault.MEMORY_FAULT),
        ],
        int(Fault.NONE),
    ).astype(jnp.uint8)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement each nonzero timer by one."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def resolve_key_wait(state: EmulatorState) -> EmulatorState:
    """Close an open key-wait latch when the host has delivered a key."""
    resolved = state.waiting & (state.last_key >= 0)
    key = jnp.astype(jnp.maximum(state.last_key, 0), jnp.uint8)
    return state.replace(
        V=jnp.where(resolved, state.V.at[state.wait_register].set(key), state.V),
        waiting=state.waiting & ~resolved,
        last_key=jnp.where(resolved, jnp.asarray(NO_KEY, dtype=jnp.int8), state.last_key),
    )


def _cycle(before: EmulatorState, state: EmulatorState) -> EmulatorState:
    instruction = fetch(state)
    fault = check_fault(state, instruction)
    return jax.lax.cond(
        fault == int(Fault.NONE),
        lambda s: tick_timers(execute(s, instruction)),
        # A faulting step also leaves a pending key delivery in place.
        lambda s: before.replace(fault=fault),
        state
    )


def _advance(state: EmulatorState) -> EmulatorState:
    resolved = resolve_key_wait(state.replace(draw_flag=jnp.asarray(False)))
    # Latch still open: the host is stepping without having delivered a key.
    return jax.lax.cond(
        resolved.waiting, tick_timers, lambda s: _cycle(state, s), resolved
    )


@jax.jit
def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle, then tick the timers.

    A state carrying a fault is returned unchanged.
    """
    return jax.lax.cond(state.fault != int(Fault.NONE), lambda s: s, _advance, state)


def needs_input(state: EmulatorState) -> jnp.ndarray:
    """True while the key-wait latch is open and no key has been delivered."""
    return state.waiting & (state.last_key < 0)


@jax.jit
def run_cycles(state: EmulatorState, max_cycles) -> tuple[EmulatorState, jnp.ndarray, jnp.ndarray]:
    """Step up to ``max_cycles`` times, stopping early on a fault or when input is needed.

    Returns:
        Tuple of the final state, the number of steps taken, and whether any
        of those steps drew to the display.
    """
    def cond_fn(carry):
        count, _, state = carry
        return (count < max_cycles) & (state.fault == int(Fault.NONE)) & ~needs_input(state)

    def body_fn(carry):
        count, redraw, state = carry
        state = step(state)
        return count + 1, redraw | state.draw_flag, state

    count, redraw, state = jax.lax.while_loop(
        cond_fn, body_fn, (jnp.zeros((), dtype=jnp.int32), jnp.asarray(False), state)
    )
    return state, count, redraw


def clear_fault(state: EmulatorState) -> EmulatorState:
    """Forget a recorded fault so the machine can be stepped again."""
    return state.replace(fault=jnp.zeros_like(state.fault))


def raise_for_fault(state: EmulatorState) -> None:
    """Raise the exception matching ``state.fault``, if any."""
    code = Fault(int(state.fault))
    if code is Fault.NONE:
        return
    pc = int(state.pc)
    opcode = int(fetch(state)) if pc + 1 < state.memory_size else None
    detail = ""
    if code is Fault.MEMORY_FAULT and opcode is not None:
        detail = f"I=0x{int(state.I):04X}, memory size {state.memory_size}"
    elif code is Fault.MEMORY_FAULT:
        detail = f"instruction fetch past end of memory ({state.memory_size} bytes)"
    error = FAULT_ERRORS[code](pc, opcode, detail)
    logger.log_fault(error)
    raise error


def checked_step(state: EmulatorState) -> EmulatorState:
    """Step and raise a ``MachineFault`` subclass if the step faulted."""
    if logger.is_enabled_for("DEBUG") and int(state.pc) + 1 < state.memory_size:
        logger.log_instruction(int(state.pc), int(fetch(state)))
    state = step(state)
    raise_for_fault(state)
    return state


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark a logical key as held; also delivers it to an open key-wait latch."""
    _check_key(key)
    return state.replace(
        keypad=state.keypad.at[key].set(True),
        last_key=jnp.where(state.waiting, jnp.asarray(key, dtype=jnp.int8), state.last_key),
    )


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark a logical key as released."""
    _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(False))


def _check_key(key: int) -> None:
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"key must be between 0 and {NUM_KEYS - 1}, got {key}")

