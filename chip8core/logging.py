"""Console logging utilities for chip8core hosts.

This module provides a small levelled console logger, an emulator-aware
subclass that formats machine state, instructions and faults, and real-time
progress bars for compiled JAX loops using io_callback.
"""

import time
import sys
from typing import Callable, Optional, Tuple

import jax
from jax.experimental import io_callback

from tqdm import tqdm

from chip8core.constants import PROGRAM_START
from chip8core.decode import disassemble
from chip8core.faults import Fault, MachineFault
from chip8core.state import EmulatorState


class ConsoleLogger:
    """Levelled console logger with optional colours and elapsed-time stamps."""

    def __init__(
        self,
        name: str = "chip8core",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream or sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class EmulatorLogger(ConsoleLogger):
    """Logger that knows how to render CHIP-8 machine state."""

    def __init__(self, name: str = "CHIP-8", **kwargs):
        super().__init__(name, **kwargs)

    def log_program_loaded(self, size: int, source: str = "program"):
        self.info(f"Loaded {source}: {size} bytes at 0x{PROGRAM_START:03X}-0x{PROGRAM_START + max(size, 1) - 1:03X}")

    def log_instruction(self, state: EmulatorState, instruction: int):
        """Log one instruction at DEBUG level, as ``PC: WORD  MNEMONIC``."""
        if self._should_log("DEBUG"):
            self.debug(f"{int(state.pc):03X}: {int(instruction):04X}  {disassemble(instruction)}")

    def format_state(self, state: EmulatorState) -> list[str]:
        """Register file, index, timers and stack as printable lines."""
        registers = [int(v) for v in state.V]
        depth = int(state.stack.pointer)
        stack = " ".join(f"{int(a):03X}" for a in state.stack.data[:depth]) or "-"
        lines = [
            " ".join(f"V{i:X}={value:02X}" for i, value in enumerate(registers[:8])),
            " ".join(f"V{i + 8:X}={value:02X}" for i, value in enumerate(registers[8:])),
            f"PC={int(state.pc):03X} I={int(state.I):03X} "
            f"DT={int(state.delay_timer):02X} ST={int(state.sound_timer):02X}",
            f"stack[{depth}]: {stack}",
        ]
        if bool(state.awaiting_key):
            lines.append("awaiting key press")
        return lines

    def log_state(self, state: EmulatorState, level: str = "DEBUG"):
        if self._should_log(level):
            for line in self.format_state(state):
                self.log(level, line)

    def log_fault(self, state: EmulatorState):
        """Report a faulted machine at ERROR level. Returns True if it was faulted."""
        fault = Fault(int(state.fault))
        if fault == Fault.NONE:
            return False
        instruction = int(state.fault_instruction)
        self.error(f"Machine halted: {fault.name} on {instruction:04X} ({disassemble(instruction)})")
        self.log_state(state, level="ERROR")
        return True

    def log_exception(self, exc: MachineFault):
        self.error(f"{type(exc).__name__}: {exc}")


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build real-time tqdm progress bar for JAX computations."""
    if desc is None:
        desc = f"Executing ({n:,} steps)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)

    tqdm_bars = {}

    if print_rate is None:
        print_rate = max(1, min(n // 20, 50))
    else:
        print_rate = max(1, min(print_rate, n))

    remainder = n % print_rate

    def _define_tqdm():
        tqdm_bars[0] = tqdm(total=n, desc=desc, unit="instr", **kwargs)

    def _update_tqdm(steps):
        if 0 in tqdm_bars:
            tqdm_bars[0].update(int(steps))

    def _close_tqdm():
        if 0 in tqdm_bars:
            tqdm_bars[0].close()

    def _update_progress_bar(iter_num):
        _ = jax.lax.cond(
            iter_num == 0,
            lambda _: io_callback(_define_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            (iter_num % print_rate == 0) & (iter_num != n - remainder) & (iter_num > 0),
            lambda _: io_callback(_update_tqdm, None, print_rate, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            iter_num == n - remainder,
            lambda _: io_callback(_update_tqdm, None, remainder, ordered=True),
            lambda _: None,
            operand=None,
        )

    def close_progress_bar(result, iter_num):
        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_close_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )
        return result

    return _update_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator to add real-time progress bar to JAX scan operations.

    The scanned ``xs`` must be the iteration index (``jnp.arange(n)``).
    """
    _update_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, print_rate, desc, **tqdm_kwargs
    )

    def _scan_progress_decorator(func):
        def wrapper_with_progress(carry, x):
            iter_num = x[0] if isinstance(x, tuple) else x

            _update_progress_bar(iter_num)

            result = func(carry, x)

            return close_progress_bar(result, iter_num)

        return wrapper_with_progress

    return _scan_progress_decorator
