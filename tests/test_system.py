"""Tests for system instructions (0xxx)."""

import pytest
import jax.numpy as jnp
from chip8vm import execute, step, create_state, PROGRAM_START
from conftest import set_registers


def test_execute_clear_screen(fresh_state):
    """Test 00E0 - Clear display."""
    state = fresh_state.replace(display=fresh_state.display.at[0, 0].set(1))
    state = state.replace(display=state.display.at[63, 31].set(1))

    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0
    assert state.pc == PROGRAM_START + 2


def test_clear_screen_on_full_display(fresh_state):
    """00E0 clears every pixel regardless of prior content."""
    state = fresh_state.replace(display=jnp.ones_like(fresh_state.display))

    state = execute(state, 0x00E0)

    assert not jnp.any(state.display)


def test_execute_call_and_return(fresh_state):
    """Test 2NNN (call) and 00EE (return) together."""
    state = fresh_state
    initial_pc = state.pc

    # Call subroutine
    state = execute(state, 0x2300)  # Call 0x300
    assert state.pc == 0x300
    assert state.stack.pointer == 1
    assert state.stack.data[state.stack.pointer - 1] == initial_pc

    # Return from subroutine
    state = execute(state, 0x00EE)  # Return
    assert state.pc == initial_pc + 2
    assert state.stack.pointer == 0


def _nested_call_program(depth):
    """0x200 calls a chain of ``depth`` subroutines, each calling the next."""
    program = bytearray(0x100 + 4 * depth)
    program[0:2] = bytes([0x23, 0x00])  # CALL 0x300
    program[2:4] = bytes([0x12, 0x02])  # JP 0x202
    for level in range(depth):
        offset = 0x100 + 4 * level
        if level < depth - 1:
            target = 0x300 + 4 * (level + 1)
            program[offset:offset + 2] = bytes([0x20 | (target >> 8), target & 0xFF])
            program[offset + 2:offset + 4] = bytes([0x00, 0xEE])
        else:
            program[offset:offset + 2] = bytes([0x00, 0xEE])
    return bytes(program)


@pytest.mark.parametrize("depth", [1, 2, 5, 16, 17, 64, 200])
def test_nested_calls_balance(depth):
    """N calls followed by N returns land after the first call with an empty stack."""
    state = create_state(_nested_call_program(depth))

    for _ in range(depth):
        state = step(state)
    assert state.stack.pointer == depth
    assert state.pc == 0x300 + 4 * (depth - 1)

    for _ in range(depth):
        state = step(state)

    assert state.pc == PROGRAM_START + 2
    assert state.stack.pointer == 0
    assert state.fault == 0


def test_default_stack_outlasts_deep_recursion():
    """A routine calling itself 300 times does not run out of stack."""
    state = create_state([0x22, 0x00])  # CALL 0x200

    for _ in range(300):
        state = step(state)

    assert state.fault == 0
    assert state.stack.pointer == 300
    assert state.stack.capacity == 4096 // 2


def test_default_stack_follows_memory_size():
    assert create_state(memory_size=0x1000).stack.capacity == 0x800
    assert create_state(memory_size=0x10000).stack.capacity == 0x8000


def test_machine_call_resets_and_jumps(fresh_state):
    """0NNN - Reset V, I, timers and display, then jump to NNN."""
    state = set_registers(fresh_state, V0=0x12, V5=0x34, VF=1, I=0x321)
    state = state.replace(
        delay_timer=jnp.asarray(9, dtype=jnp.uint8),
        sound_timer=jnp.asarray(7, dtype=jnp.uint8),
        display=fresh_state.display.at[3, 4].set(1),
    )
    state = execute(state, 0x2400)  # leave something on the stack

    state = execute(state, 0x0300)

    assert state.pc == 0x300
    assert not jnp.any(state.V)
    assert state.I == 0
    assert state.delay_timer == 0
    assert state.sound_timer == 0
    assert not jnp.any(state.display)
    assert state.stack.pointer == 1


def test_machine_call_keeps_memory(fresh_state):
    """0NNN leaves memory untouched."""
    state = fresh_state.replace(memory=fresh_state.memory.at[0x300].set(0xAB))

    state = execute(state, 0x0ABC)

    assert state.memory[0x300] == 0xAB
    assert state.pc == 0xABC
