# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Mode Table Compiler - Writes static C definitions for a batch of codec modes.

The generated file contains:
- every table each mode needs, written once per dedup key
- one CELTMode record per mode
- static_mode_list, enumerating the modes in input order

The output file is static_modes_fixed.h or static_modes_float.h depending on
the numeric mode of the build.
"""

import io
from dataclasses import dataclass
from pathlib import Path
from abc import ABC, abstractmethod

from .constants import INCLUDES, MODE_COUNT_NAME, MODE_LIST_NAME, TYPE_MODE
from .emitter import ModeEmitter
from .numeric import FixedPointFormat, FloatingPointFormat
from .registry import TableRegistry


@dataclass
class BatchSummary:
    """
    Properties shared by every mode of a batch.
    0 means no mode was seen, -1 means the modes disagree.
    """

    channels: int = 0
    frame_size: int = 0
    overlap: int = 0


def _merge(current, value):
    if current == 0:
        return value
    if current != value:
        return -1
    return current


def summarize_batch(modes):
    """
    Computes the uniform frame size and overlap of a batch.

    Channel count is not part of a mode descriptor, so `channels` stays 0.

    Args:
        modes: The ModeDescriptors of the batch.

    Returns:
        A BatchSummary.
    """
    summary = BatchSummary()
    for mode in modes:
        summary.frame_size = _merge(summary.frame_size, mode.frame_size)
        summary.overlap = _merge(summary.overlap, mode.overlap)
    return summary


class ModeCompiler(ABC):
    """
    Compiles a batch of mode descriptors into a static modes header.
    """

    def __new__(cls, modes, output_dir=".", fixed_point=False, verbose=True):
        """
        Factory method to create a ModeCompiler instance.

        Args:
            modes: The ModeDescriptors to compile, in output order.
            output_dir: Directory the generated file is written to.
            fixed_point: Emit fixed-point tables instead of floating-point ones.
            verbose: Print progress to stdout.
        """
        if fixed_point:
            instance = super().__new__(_FixedPointCompiler)
        else:
            instance = super().__new__(_FloatingPointCompiler)

        return instance

    def __init__(self, modes, output_dir=".", fixed_point=False, verbose=True):
        """
        Initializes the Mode Compiler.

        Args:
            modes: The ModeDescriptors to compile, in output order.
            output_dir: Directory the generated file is written to.
            fixed_point: Emit fixed-point tables instead of floating-point ones.
            verbose: Print progress to stdout.
        """
        self.modes = list(modes)
        self.output_dir = Path(output_dir)
        self.verbose = verbose
        self.numeric = self._create_numeric_format()

        # Registry of the most recent dump_modes() call
        self.registry = None

    @abstractmethod
    def _create_numeric_format(self):
        """
        Returns the NumericFormat used to render table coefficients.
        """
        pass

    @property
    def output_path(self):
        return self.output_dir / self.numeric.filename

    def _log(self, message):
        if self.verbose:
            print(message)

    def compile(self):
        """
        Writes the generated file.

        Returns:
            The path of the written file.
        """
        # Render fully before touching the file system
        text = self.render()
        path = self.write(text)
        self._log("Compilation complete!")
        return path

    def write(self, text):
        """
        Writes already rendered text to the output file.

        Returns:
            The path of the written file.
        """
        self._log(f"Writing: {self.output_path}")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        with open(self.output_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        return self.output_path

    def render(self):
        """
        Returns the generated file as a string.
        """
        self._log(f"Compiling {len(self.modes)} modes ({self.numeric.name})")
        out = io.StringIO()
        self.dump_modes(out)
        self._log(f"  Tables: {len(self.registry)} written, {len(self.modes)} mode records")
        return out.getvalue()

    def dump_modes(self, out):
        """
        Writes every mode of the batch and the list of modes to a text stream.

        A fresh TableRegistry is shared by all modes of this call.

        Args:
            out: Writable text stream.

        Returns:
            The TableRegistry holding every table written.
        """
        self.registry = TableRegistry()
        emitter = ModeEmitter(out, self.registry, self.numeric)

        arguments = "".join(f" {mode.sample_rate} {mode.frame_size}" for mode in self.modes)
        out.write("/* The contents of this file was automatically generated by modetab\n")
        out.write(f"   with arguments:{arguments}\n")
        out.write("   It contains static definitions for some pre-defined modes. */\n")
        for include in INCLUDES:
            out.write(f"#include \"{include}\"\n")
        out.write("\n")

        symbols = []
        for mode in self.modes:
            symbol = emitter.emit(mode)
            symbols.append(symbol)
            self._log(f"  Emitted: {symbol}")

        out.write("\n")
        out.write("/* List of all the available modes */\n")
        out.write(f"#define {MODE_COUNT_NAME} {len(symbols)}\n")
        out.write(f"static const {TYPE_MODE} * const {MODE_LIST_NAME}[{MODE_COUNT_NAME}] = {{\n")
        for symbol in symbols:
            out.write(f"&{symbol},\n")
        out.write("};\n")

        return self.registry

    def dump_header(self, out):
        """
        Writes the companion header: constants shared by every mode of the batch.
        A property that differs between modes is left undefined.

        Args:
            out: Writable text stream.
        """
        summary = summarize_batch(self.modes)

        out.write("/* This header file is generated automatically*/\n")
        if summary.channels > 0:
            out.write(f"#define CHANNELS(mode) {summary.channels}\n")
            if summary.channels == 1:
                out.write("#define DISABLE_STEREO\n")
        if summary.frame_size > 0:
            out.write(f"#define FRAMESIZE(mode) {summary.frame_size}\n")
        if summary.overlap > 0:
            out.write(f"#define OVERLAP(mode) {summary.overlap}\n")

    def write_header(self, path):
        """
        Writes the companion header to a file.

        Returns:
            The path written.
        """
        path = Path(path)
        self._log(f"Writing header: {path}")
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            self.dump_header(f)
        return path


class _FixedPointCompiler(ModeCompiler):
    """
    Compiler for fixed-point builds (static_modes_fixed.h).
    """

    def _create_numeric_format(self):
        return FixedPointFormat()


class _FloatingPointCompiler(ModeCompiler):
    """
    Compiler for floating-point builds (static_modes_float.h).
    """

    def _create_numeric_format(self):
        return FloatingPointFormat()


def compile_modes(modes, fixed_point=False):
    """
    Renders a batch of modes without writing any file.

    Returns:
        The generated text.
    """
    compiler = ModeCompiler(modes, fixed_point=fixed_point, verbose=False)
    return compiler.render()
