# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Static Modes Parser - Reads a generated static modes header back into values.

Only the subset of C written by the compiler is understood: include guards,
`#define`s, `static const` arrays, one-field-per-line struct records and the
mode pointer list.
"""

import re
from dataclasses import dataclass

from .constants import MODE_LIST_NAME, TYPE_TWIDDLE
from .numeric import parse_literal

_GUARD_RE = re.compile(r"^#ifndef (\w+)$", re.M)
_DEFINE_RE = re.compile(r"^#define (\w+(?:\(\w+\))?)(?: (.*))?$", re.M)
_ARRAY_RE = re.compile(r"^static const ([\w ]+?) (\w+)\[(\w+)\] = \{(.*?)\};$", re.M | re.S)
_RECORD_RE = re.compile(r"^static const (\w+) (\w+) = \{\n(.*?)^\};$", re.M | re.S)
_FIELD_RE = re.compile(r"^(.*),\t/\* (\w+) \*/$")
_MODE_LIST_RE = re.compile(r"^static const \w+ \* const (\w+)\[(\w+)\] = \{(.*?)\};$", re.M | re.S)


@dataclass
class ParsedTable:
    ctype: str
    name: str
    length: int
    values: list


def split_values(body):
    """
    Splits an initializer into literal texts, dropping braces and empty items.
    """
    flat = body.replace("{", " ").replace("}", " ")
    return [item.strip() for item in flat.split(",") if item.strip()]


class StaticModesParser:
    """
    A parser for generated static modes headers.
    """

    def __init__(self, text):
        """
        Initializes the parser.

        Args:
            text: The generated source text.
        """
        self.text = text
        self.guards = []
        self.defines = {}
        self.tables = {}
        self.records = {}
        self.mode_list = []

    def parse(self):
        """
        Parses the entire text.

        Returns:
            self, for chaining.
        """
        self.guards = _GUARD_RE.findall(self.text)
        self.defines = {name: (value or "").strip() for name, value in _DEFINE_RE.findall(self.text)}

        for ctype, name, length, body in _ARRAY_RE.findall(self.text):
            values = [parse_literal(item) for item in split_values(body)]
            if ctype == TYPE_TWIDDLE:
                values = [tuple(values[i:i + 2]) for i in range(0, len(values), 2)]
            self.tables[name] = ParsedTable(ctype, name, self._resolve_length(length), values)

        for ctype, name, body in _RECORD_RE.findall(self.text):
            self.records[name] = self._parse_fields(body)

        match = _MODE_LIST_RE.search(self.text)
        if match and match.group(1) == MODE_LIST_NAME:
            self.mode_list = [item.lstrip("&") for item in split_values(match.group(3))]

        return self

    def _resolve_length(self, length):
        if length.isdigit():
            return int(length)
        return int(self.defines[length])

    def _parse_fields(self, body):
        """
        Parses "value,\t/* field */" lines into a field -> raw text mapping.
        """
        fields = {}
        for line in body.splitlines():
            match = _FIELD_RE.match(line)
            if match:
                fields[match.group(2)] = match.group(1)
        return fields

    def duplicate_guards(self):
        """
        Returns guards that open more than one conditional block.
        """
        seen = set()
        duplicates = []
        for guard in self.guards:
            if guard in seen and guard not in duplicates:
                duplicates.append(guard)
            seen.add(guard)
        return duplicates

    def count_definitions(self, name):
        """
        Returns how many times `name` is defined as a table or record.
        """
        pattern = re.compile(rf"^static const [\w ]+? {re.escape(name)}(\[\w+\])? = \{{", re.M)
        return len(pattern.findall(self.text))

    def record_fields(self, name):
        """
        Returns the field -> raw text mapping of a record, split into literals
        for brace-enclosed fields.
        """
        return {
            field: split_values(raw) if raw.startswith("{") else raw
            for field, raw in self.records[name].items()
        }
