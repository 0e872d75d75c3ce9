"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, flag)``; ``flag`` is None for
operations that leave VF alone. The flag is written after the result, so
it wins when X is F.
"""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER
from chip8vm.instructions import advance


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.uint16) + vy
    carry = result > 0xFF
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    no_borrow = vx >= vy
    return vx - vy, no_borrow


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VF = LSB of VX, VX >>= 1."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    no_borrow = vy >= vx
    return vy - vx, no_borrow


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VF = MSB of VX as 0/1, VX <<= 1."""
    return vx << 1, (vx >> 7) & 1


def make_alu_instruction(operation):
    """Factory turning an ALU operation into an instruction handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        result, flag = operation(state.V[instruction.x], state.V[instruction.y])
        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return advance(state.replace(V=new_V))
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
