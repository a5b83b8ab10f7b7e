"""CHIP-8 system instructions (0x0xxx) and the invalid-opcode handler."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.faults import Fault, raise_fault
from chip8core.stack import pop, is_empty


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine. Faults when no call is active."""
    def _return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda state: raise_fault(state, Fault.STACK_UNDERFLOW, instruction.raw),
        _return,
        state
    )


def execute_invalid(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Any word that decodes to no instruction halts the machine."""
    return raise_fault(state, Fault.INVALID_OPCODE, instruction.raw)
