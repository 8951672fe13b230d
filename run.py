"""Command-line entry point for the Python CHIP-8 emulator."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pychip8.loader import Variant
from pychip8.system import DEFAULT_STEPS_PER_TICK
from pychip8.ui.app import AppConfig, Chip8App
from pychip8.video import PALETTES, palette_by_name


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run.py",
        description="CHIP-8 emulator",
    )
    parser.add_argument(
        "--rom",
        type=Path,
        required=True,
        help="Path to the CHIP-8 program image",
    )
    parser.add_argument(
        "--variant",
        choices=("standard", "eti660"),
        default="standard",
        help="Program load convention: standard (0x200) or eti660 (0x600)",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=10,
        help="Integer window scale factor (default: 10)",
    )
    parser.add_argument(
        "--palette",
        choices=sorted(PALETTES),
        default="monochrome",
        help="Display colours (default: monochrome)",
    )
    parser.add_argument(
        "--fullscreen",
        action="store_true",
        help="Launch the emulator in fullscreen mode",
    )
    parser.add_argument(
        "--speed",
        type=int,
        default=DEFAULT_STEPS_PER_TICK,
        help=f"Instructions executed per 60 Hz timer tick (default: {DEFAULT_STEPS_PER_TICK})",
    )
    parser.add_argument(
        "--permissive",
        action="store_true",
        help="Skip unknown opcodes instead of halting",
    )
    parser.add_argument(
        "--strict-sys",
        action="store_true",
        help="Halt on SYS (0NNN) machine routine calls instead of ignoring them",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the RND instruction",
    )
    parser.add_argument(
        "--no-audio",
        action="store_true",
        help="Disable the buzzer",
    )
    parser.add_argument(
        "--headless",
        type=int,
        metavar="FRAMES",
        help="Run FRAMES timer ticks without a window and print the display",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if not args.rom.exists():
        parser.error(f"ROM file not found: {args.rom}")
    if args.scale <= 0:
        parser.error("--scale must be positive")
    if args.speed <= 0:
        parser.error("--speed must be positive")
    if args.headless is not None and args.headless < 0:
        parser.error("--headless must not be negative")

    config = AppConfig(
        rom_path=args.rom,
        variant=Variant.from_name(args.variant),
        scale=args.scale,
        fullscreen=args.fullscreen,
        steps_per_tick=args.speed,
        strict_decode=not args.permissive,
        strict_sys=args.strict_sys,
        rng_seed=args.seed,
        palette=palette_by_name(args.palette),
        enable_audio=not args.no_audio,
    )
    app = Chip8App(config)
    try:
        if args.headless is not None:
            machine = app.run_headless(args.headless)
            for line in machine.framebuffer.rows():
                print(line)
        else:
            app.run()
    except RuntimeError as exc:
        parser.exit(1, f"run.py: {exc}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
