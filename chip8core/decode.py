"""CHIP-8 instruction decoding.

Decoding is a pure function of the 16-bit word. Besides the raw operand
fields, every word is classified into exactly one :class:`Op`, so the
execution engine needs a single dispatch on ``op``.
"""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Op(IntEnum):
    """Every CHIP-8 instruction, plus INVALID for unmatched words."""
    CLS = 0          # 00E0
    RET = 1          # 00EE
    JP = 2           # 1NNN
    CALL = 3         # 2NNN
    SE_IMM = 4       # 3XNN
    SNE_IMM = 5      # 4XNN
    SE_REG = 6       # 5XY0
    LD_IMM = 7       # 6XNN
    ADD_IMM = 8      # 7XNN
    LD_REG = 9       # 8XY0
    OR = 10          # 8XY1
    AND = 11         # 8XY2
    XOR = 12         # 8XY3
    ADD_REG = 13     # 8XY4
    SUB = 14         # 8XY5
    SHR = 15         # 8XY6
    SUBN = 16        # 8XY7
    SHL = 17         # 8XYE
    SNE_REG = 18     # 9XY0
    LD_I = 19        # ANNN
    JP_V0 = 20       # BNNN
    RND = 21         # CXNN
    DRW = 22         # DXYN
    SKP = 23         # EX9E
    SKNP = 24        # EXA1
    LD_VX_DT = 25    # FX07
    LD_KEY = 26      # FX0A
    LD_DT_VX = 27    # FX15
    LD_ST_VX = 28    # FX18
    ADD_I = 29       # FX1E
    LD_FONT = 30     # FX29
    BCD = 31         # FX33
    STORE = 32       # FX55
    LOAD = 33        # FX65
    INVALID = 34


# (mask, value, op): a word is an instance of op when word & mask == value.
# 5XYN and 9XYN ignore the low nibble.
PATTERNS = (
    (0xFFFF, 0x00E0, Op.CLS),
    (0xFFFF, 0x00EE, Op.RET),
    (0xF000, 0x1000, Op.JP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SE_IMM),
    (0xF000, 0x4000, Op.SNE_IMM),
    (0xF000, 0x5000, Op.SE_REG),
    (0xF000, 0x6000, Op.LD_IMM),
    (0xF000, 0x7000, Op.ADD_IMM),
    (0xF00F, 0x8000, Op.LD_REG),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD_REG),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),
    (0xF000, 0x9000, Op.SNE_REG),
    (0xF000, 0xA000, Op.LD_I),
    (0xF000, 0xB000, Op.JP_V0),
    (0xF000, 0xC000, Op.RND),
    (0xF000, 0xD000, Op.DRW),
    (0xF0FF, 0xE09E, Op.SKP),
    (0xF0FF, 0xE0A1, Op.SKNP),
    (0xF0FF, 0xF007, Op.LD_VX_DT),
    (0xF0FF, 0xF00A, Op.LD_KEY),
    (0xF0FF, 0xF015, Op.LD_DT_VX),
    (0xF0FF, 0xF018, Op.LD_ST_VX),
    (0xF0FF, 0xF01E, Op.ADD_I),
    (0xF0FF, 0xF029, Op.LD_FONT),
    (0xF0FF, 0xF033, Op.BCD),
    (0xF0FF, 0xF055, Op.STORE),
    (0xF0FF, 0xF065, Op.LOAD),
)

_MASKS = jnp.array([mask for mask, _, _ in PATTERNS], dtype=jnp.int32)
_VALUES = jnp.array([value for _, value, _ in PATTERNS], dtype=jnp.int32)
_OPS = jnp.array([int(op) for _, _, op in PATTERNS], dtype=jnp.int32)


def addr12(instruction):
    """Low 12 bits: address operand."""
    return instruction & 0x0FFF


def reg_x(instruction):
    return (instruction >> 8) & 0x0F


def reg_y(instruction):
    return (instruction >> 4) & 0x0F


def imm8(instruction):
    return instruction & 0x00FF


def nibble(instruction):
    """Low 4 bits: sprite height or sub-opcode."""
    return instruction & 0x000F


def classify(instruction) -> jnp.ndarray:
    """Return the :class:`Op` index of a 16-bit word (traceable)."""
    matches = (instruction & _MASKS) == _VALUES
    return jnp.where(jnp.any(matches), _OPS[jnp.argmax(matches)], int(Op.INVALID))


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int      # Op index
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    instruction = jnp.asarray(instruction, dtype=jnp.int32) & 0xFFFF
    return DecodedInstruction(
        raw=instruction,
        op=classify(instruction),
        x=reg_x(instruction),
        y=reg_y(instruction),
        n=nibble(instruction),
        nn=imm8(instruction),
        nnn=addr12(instruction),
    )


_MNEMONICS = {
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.JP: "JP {nnn:03X}",
    Op.CALL: "CALL {nnn:03X}",
    Op.SE_IMM: "SE V{x:X}, {nn:02X}",
    Op.SNE_IMM: "SNE V{x:X}, {nn:02X}",
    Op.SE_REG: "SE V{x:X}, V{y:X}",
    Op.LD_IMM: "LD V{x:X}, {nn:02X}",
    Op.ADD_IMM: "ADD V{x:X}, {nn:02X}",
    Op.LD_REG: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD_REG: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHR: "SHR V{x:X}",
    Op.SUBN: "SUBN V{x:X}, V{y:X}",
    Op.SHL: "SHL V{x:X}",
    Op.SNE_REG: "SNE V{x:X}, V{y:X}",
    Op.LD_I: "LD I, {nnn:03X}",
    Op.JP_V0: "JP V0, {nnn:03X}",
    Op.RND: "RND V{x:X}, {nn:02X}",
    Op.DRW: "DRW V{x:X}, V{y:X}, {n:X}",
    Op.SKP: "SKP V{x:X}",
    Op.SKNP: "SKNP V{x:X}",
    Op.LD_VX_DT: "LD V{x:X}, DT",
    Op.LD_KEY: "LD V{x:X}, K",
    Op.LD_DT_VX: "LD DT, V{x:X}",
    Op.LD_ST_VX: "LD ST, V{x:X}",
    Op.ADD_I: "ADD I, V{x:X}",
    Op.LD_FONT: "LD F, V{x:X}",
    Op.BCD: "LD B, V{x:X}",
    Op.STORE: "LD [I], V{x:X}",
    Op.LOAD: "LD V{x:X}, [I]",
    Op.INVALID: "DW {raw:04X}",
}


def disassemble(instruction: int) -> str:
    """Render a 16-bit word as an assembler mnemonic (host side, not traceable)."""
    instruction = int(instruction) & 0xFFFF
    fields = dict(
        raw=instruction,
        x=reg_x(instruction),
        y=reg_y(instruction),
        n=nibble(instruction),
        nn=imm8(instruction),
        nnn=addr12(instruction),
    )
    return _MNEMONICS[Op(int(classify(instruction)))].format(**fields)
