# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Command-line interface for modetab.

Usage:
  modetab [options] rate frame_size [rate frame_size]...

Each (rate, frame_size) pair is loaded from <modes-dir>/mode_<rate>_<frame_size>.json
and all modes are written to static_modes_float.h (or static_modes_fixed.h).
"""

from __future__ import annotations

import argparse
import sys

from .compiler import ModeCompiler
from .descriptor import ModeLibrary, ModeCreationError
from .numeric import numeric_format
from .parser import StaticModesParser
from .verify import ModeTableVerifier

EXIT_USAGE = 1
EXIT_MODE_FAILURE = 2
EXIT_ERROR = 1

USAGE = "Usage: {prog} rate frame_size [rate frame_size] [rate frame_size]..."


class _UsageParser(argparse.ArgumentParser):
    """
    ArgumentParser whose errors exit with the usage status instead of 2.
    """

    def error(self, message):
        self.exit(EXIT_USAGE, USAGE.format(prog=self.prog) + f"\n{self.prog}: error: {message}\n")


def _build_root_parser():
    p = _UsageParser(
        prog="modetab",
        usage="%(prog)s [options] rate frame_size [rate frame_size]...",
        description="Generate static C definitions of precomputed codec modes",
    )
    p.add_argument("values", nargs="*", metavar="rate frame_size", help="Sample rate and frame size of each mode")
    p.add_argument("--modes-dir", default="modes", help="Directory with mode_<rate>_<frame_size>.json descriptors (default: modes)")
    p.add_argument("--fixed-point", action="store_true", help="Emit tables for a fixed-point build")
    p.add_argument("-o", "--output-dir", default=".", help="Directory for the generated file (default: current directory)")
    p.add_argument("--header", metavar="FILE", help="Also write a header with the constants shared by all modes")
    p.add_argument("--verify", action="store_true", help="Re-read the generated tables and check them against the descriptors")
    p.add_argument("-q", "--quiet", action="store_true", help="Do not print progress")
    return p


def _parse_pairs(values):
    """
    Turns positional arguments into (rate, frame_size) pairs.

    Returns:
        A list of pairs, or None when the arguments are malformed.
    """
    if len(values) < 2 or len(values) % 2 != 0:
        return None
    try:
        numbers = [int(v) for v in values]
    except ValueError:
        return None
    return list(zip(numbers[0::2], numbers[1::2]))


def main(argv=None):
    """
    Entry point for `modetab` and `python -m modetab`.

    Returns exit code (0 on success).
    """
    argv = list(argv) if argv is not None else None
    parser = _build_root_parser()
    try:
        args = parser.parse_intermixed_args(argv)
    except SystemExit as e:
        return e.code

    pairs = _parse_pairs(args.values)
    if pairs is None:
        print(USAGE.format(prog=parser.prog), file=sys.stderr)
        return EXIT_USAGE

    for pair in sorted(set(pairs)):
        if pairs.count(pair) > 1:
            print(f"Warning: Fs={pair[0]}, frame_size={pair[1]} is requested {pairs.count(pair)} times; "
                  "the generated header will define its mode more than once.", file=sys.stderr)

    numeric = numeric_format(args.fixed_point)
    library = ModeLibrary(args.modes_dir, numeric.dtype)

    modes = []
    for rate, frame_size in pairs:
        try:
            modes.append(library.create(rate, frame_size))
        except ModeCreationError as e:
            print(e, file=sys.stderr)
            return EXIT_MODE_FAILURE
        if not args.quiet:
            print(f"  Loaded: {library.path_for(rate, frame_size).name}")

    try:
        compiler = ModeCompiler(modes, args.output_dir, fixed_point=args.fixed_point, verbose=not args.quiet)
        text = compiler.render()

        if args.verify:
            verifier = ModeTableVerifier(StaticModesParser(text).parse(), modes, compiler.numeric)
            verifier.raise_for_errors()
            if not args.quiet:
                print("  Verified: all tables match their descriptors")

        compiler.write(text)
        if args.header:
            compiler.write_header(args.header)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if not args.quiet:
        print("Compilation complete!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
