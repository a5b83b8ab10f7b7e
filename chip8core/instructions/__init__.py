"""CHIP-8 instruction implementations, grouped by opcode family."""
