"""
Minimal terminal host for chip8core: loads a ROM, runs it frame by frame and
prints the display when the program halts or the frame budget runs out.
"""

import argparse
import time

import jax

from chip8core import (
    create_state, load_program, run, check_fault, read_timers, write_timers,
    display_rows, MachineFault, EmulatorLogger,
)


def run_host(rom_path, frames=600, instructions_per_frame=11, seed=0, realtime=False, verbose=False):
    logger = EmulatorLogger(log_level="DEBUG" if verbose else "INFO")

    with open(rom_path, "rb") as f:
        rom = f.read()

    state = load_program(create_state(jax.random.PRNGKey(seed)), rom)
    logger.log_program_loaded(len(rom), source=rom_path)

    for frame in range(frames):
        start = time.perf_counter()
        state = run(state, instructions_per_frame)

        # 60 Hz timer tick, once per frame.
        delay, sound = read_timers(state)
        state = write_timers(state, delay=max(delay - 1, 0), sound=max(sound - 1, 0))

        try:
            check_fault(state)
        except MachineFault as exc:
            logger.log_exception(exc)
            logger.log_fault(state)
            break

        if verbose and frame % 60 == 0:
            logger.log_state(state)

        if realtime:
            time.sleep(max(0.0, 1 / 60 - (time.perf_counter() - start)))

    for row in display_rows(state):
        print(row)
    return state


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a CHIP-8 ROM headless")
    parser.add_argument("rom")
    parser.add_argument("--frames", type=int, default=600)
    parser.add_argument("--ipf", type=int, default=11, help="instructions per 60 Hz frame")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--realtime", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    run_host(args.rom, args.frames, args.ipf, args.seed, args.realtime, args.verbose)
