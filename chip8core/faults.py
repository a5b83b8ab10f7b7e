"""Machine faults: in-state fault codes and the host-side exceptions raised for them."""

from enum import IntEnum

import jax.numpy as jnp

from chip8core.constants import ADDRESS_MASK, INSTRUCTION_SIZE
from chip8core.state import EmulatorState


class Fault(IntEnum):
    """Fault codes stored in ``EmulatorState.fault``."""
    NONE = 0
    STACK_OVERFLOW = 1
    STACK_UNDERFLOW = 2
    INVALID_OPCODE = 3


class MachineFault(Exception):
    """Base class for faults surfaced to the host."""

    def __init__(self, message: str, instruction: int, pc: int):
        super().__init__(message)
        self.instruction = instruction
        self.pc = pc


class StackOverflowError(MachineFault):
    """Subroutine call with all 16 stack slots in use."""


class StackUnderflowError(MachineFault):
    """Return with no active subroutine call."""


class InvalidOpcodeError(MachineFault):
    """Instruction word that matches no known instruction."""


_EXCEPTIONS = {
    Fault.STACK_OVERFLOW: (StackOverflowError, "stack overflow"),
    Fault.STACK_UNDERFLOW: (StackUnderflowError, "stack underflow"),
    Fault.INVALID_OPCODE: (InvalidOpcodeError, "invalid opcode"),
}


def raise_fault(state: EmulatorState, fault: Fault, instruction) -> EmulatorState:
    """Record a fault in the state. Traceable; all other fields are left untouched."""
    return state.replace(
        fault=jnp.asarray(int(fault), dtype=jnp.uint8),
        fault_instruction=jnp.astype(instruction, jnp.uint16),
    )


def is_halted(state: EmulatorState) -> bool:
    return int(state.fault) != Fault.NONE


def check_fault(state: EmulatorState) -> EmulatorState:
    """Raise the matching :class:`MachineFault` if the machine has faulted.

    Returns the state unchanged otherwise, so it can be chained after ``step``.
    """
    fault = Fault(int(state.fault))
    if fault == Fault.NONE:
        return state

    exc_type, description = _EXCEPTIONS[fault]
    instruction = int(state.fault_instruction)
    # PC has already been advanced past the faulting word by fetch.
    pc = (int(state.pc) - INSTRUCTION_SIZE) & ADDRESS_MASK
    raise exc_type(f"{description}: {instruction:04X} at 0x{pc:03X}", instruction, pc)
