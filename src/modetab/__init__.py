# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

from .compiler import ModeCompiler, compile_modes, summarize_batch
from .descriptor import ModeDescriptor, ModeLibrary, ModeCreationError, TableShapeError
from .parser import StaticModesParser
from .registry import TableRegistry
from .verify import ModeTableVerifier

__all__ = [
    "ModeCompiler",
    "compile_modes",
    "summarize_batch",
    "ModeDescriptor",
    "ModeLibrary",
    "ModeCreationError",
    "TableShapeError",
    "StaticModesParser",
    "TableRegistry",
    "ModeTableVerifier"
]
