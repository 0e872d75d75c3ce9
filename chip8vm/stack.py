"""CHIP-8 stack operations.

Bounds are checked by the emulator before these run; an out-of-range push
is dropped by the scatter and an empty pop reads a stale slot.
"""

import jax.numpy as jnp
from chip8vm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack."""
    new_data = stack.data.at[stack.pointer].set(jnp.astype(address, jnp.uint16), mode="drop")
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    new_pointer = stack.pointer - 1
    slot = jnp.maximum(new_pointer, 0)
    popped_address = stack.data[slot]
    new_data = stack.data.at[slot].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer <= 0


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= stack.capacity
