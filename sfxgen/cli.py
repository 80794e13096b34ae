"""sfxgen command line — render, generate, mutate and inspect parameter files.

Usage:
    sfxgen render coin.rfx laser.sfs          # writes coin.wav, laser.wav
    sfxgen render coin.rfx -o out/coin.wav laser.sfs -o out/laser.wav
    sfxgen gen explosion --seed 1234 -o boom.rfx --wav boom.wav
    sfxgen mutate boom.rfx -o boom2.rfx
    sfxgen show boom.rfx
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import structlog

from sfxgen.codec import load_params, save_rfx
from sfxgen.config import settings
from sfxgen.errors import CodecError, SfxGenError
from sfxgen.presets import PRESETS, generate_preset, mutate
from sfxgen.random_source import NumpyRandomSource
from sfxgen.synth import SynthContext, generate_wave
from sfxgen.wave import save_wave

logger = structlog.get_logger()

# sysexits.h
EX_OK = 0
EX_USAGE = 64
EX_IOERR = 74
EX_CONFIG = 78


def configure_logging(level: str | None = None) -> None:
    """Route structlog to stderr, filtered at ``level``."""
    level_no = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(level_no, int):
        level_no = logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def _render(params_path: Path, wav_path: Path, ctx: SynthContext) -> int:
    try:
        loaded = load_params(params_path)
    except CodecError as e:
        logger.error("cli.render.load_failed", error=e.message, path=str(params_path))
        return EX_CONFIG

    rng = NumpyRandomSource()
    if loaded.params.rand_seed:
        rng.seed(loaded.params.rand_seed)
    frames = generate_wave(ctx, loaded.params, rng)

    try:
        save_wave(ctx, frames, wav_path)
    except (OSError, RuntimeError) as e:
        logger.error("cli.render.save_failed", error=str(e), path=str(wav_path))
        return EX_IOERR
    print(f"{params_path} -> {wav_path} ({frames} frames)")
    return EX_OK


def _render_jobs(items: list[str]) -> list[tuple[Path, Path]]:
    """Pair each parameter file with the ``-o`` path that follows it, if any."""
    jobs = []
    i = 0
    while i < len(items):
        params_path = Path(items[i])
        if i + 1 < len(items) and items[i + 1] in ("-o", "--output"):
            if i + 2 >= len(items):
                msg = "Output filename missing"
                raise ValueError(msg)
            wav_path = Path(items[i + 2])
            i += 3
        else:
            wav_path = params_path.with_suffix(".wav")
            i += 1
        jobs.append((params_path, wav_path))
    return jobs


def cmd_render(args: argparse.Namespace) -> int:
    try:
        jobs = _render_jobs(args.items)
    except ValueError as e:
        logger.error("cli.render.bad_arguments", error=str(e))
        return EX_USAGE
    if not jobs:
        logger.error("cli.render.no_input")
        return EX_USAGE

    ctx = SynthContext.from_settings()
    for params_path, wav_path in jobs:
        code = _render(params_path, wav_path, ctx)
        if code != EX_OK:
            return code
    return EX_OK


def cmd_gen(args: argparse.Namespace) -> int:
    rng = NumpyRandomSource()
    params = generate_preset(args.preset, rng, seed=args.seed)
    out = Path(args.output) if args.output else settings.output_dir / f"{args.preset}.rfx"

    try:
        save_rfx(params, out)
    except CodecError as e:
        logger.error("cli.gen.save_failed", error=e.message, path=str(out))
        return EX_IOERR
    print(f"{args.preset} seed={params.rand_seed} -> {out}")

    if args.wav:
        ctx = SynthContext.from_settings()
        return _render(out, Path(args.wav), ctx)
    return EX_OK


def cmd_mutate(args: argparse.Namespace) -> int:
    try:
        loaded = load_params(args.params)
    except CodecError as e:
        logger.error("cli.mutate.load_failed", error=e.message, path=args.params)
        return EX_CONFIG

    rng = NumpyRandomSource(args.seed)
    params = mutate(loaded.params, rng, range_=args.range, mask=args.mask)
    try:
        save_rfx(params, args.output)
    except CodecError as e:
        logger.error("cli.mutate.save_failed", error=e.message, path=args.output)
        return EX_IOERR
    print(f"{args.params} -> {args.output}")
    return EX_OK


def cmd_show(args: argparse.Namespace) -> int:
    try:
        loaded = load_params(args.params)
    except CodecError as e:
        logger.error("cli.show.load_failed", error=e.message, path=args.params)
        return EX_CONFIG

    report = {
        "format": loaded.source_format,
        "version": loaded.version,
        "volume": loaded.volume,
        "params": loaded.params.to_dict(),
    }
    print(json.dumps(report, indent=2))
    return EX_OK


def _int_auto(text: str) -> int:
    return int(text, 0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sfxgen", description="sfxr-style sound effect generator")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render parameter files to WAV.")
    render.add_argument(
        "items",
        nargs=argparse.REMAINDER,
        metavar="PARAMS [-o WAV]",
        help=".rfx or .sfs files, each optionally followed by -o and its WAV path",
    )
    render.set_defaults(func=cmd_render)

    gen = sub.add_parser("gen", help="Generate a preset parameter file.")
    gen.add_argument("preset", choices=sorted(PRESETS))
    gen.add_argument("--seed", type=_int_auto, default=None)
    gen.add_argument("-o", "--output", default=None, help="rFX path")
    gen.add_argument("--wav", default=None, help="Also render to this WAV path")
    gen.set_defaults(func=cmd_gen)

    mut = sub.add_parser("mutate", help="Mutate a parameter file.")
    mut.add_argument("params")
    mut.add_argument("-o", "--output", required=True, help="rFX path")
    mut.add_argument("--range", type=float, default=settings.mutate_range)
    mut.add_argument("--mask", type=_int_auto, default=settings.mutate_mask)
    mut.add_argument("--seed", type=_int_auto, default=None)
    mut.set_defaults(func=cmd_mutate)

    show = sub.add_parser("show", help="Print a parameter file as JSON.")
    show.add_argument("params")
    show.set_defaults(func=cmd_show)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EX_OK if e.code == 0 else EX_USAGE

    configure_logging(args.log_level)
    try:
        return args.func(args)
    except SfxGenError as e:
        logger.error("cli.failed", command=args.command, error=str(e))
        return EX_IOERR


if __name__ == "__main__":
    raise SystemExit(main())
