# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
C source utility functions.
Builds the text of static array and struct definitions from already formatted
values. Line wrapping lives here and never touches the values themselves.
"""


def wrap_values(texts, per_line):
    """
    Joins formatted values as "v," items, breaking the line after every `per_line` items.

    Args:
        texts: Formatted values.
        per_line: Number of values per output line.

    Returns:
        The joined text. The last item is followed by a newline or a space.
    """
    parts = []
    for j, text in enumerate(texts):
        end = "\n" if (j + 1) % per_line == 0 else " "
        parts.append(f"{text},{end}")
    return "".join(parts)


def inline_values(texts, width=0):
    """
    Joins formatted values on one line as "v, v, ".

    Args:
        texts: Formatted values.
        width: Minimum field width (right-aligned) of each value.
    """
    return "".join(f"{text:>{width}}, " for text in texts)


def array_definition(ctype, name, length, body):
    """
    Creates a `static const` array definition.

    Args:
        ctype: The element type.
        name: The symbol name.
        length: The declared length.
        body: The initializer text, including its trailing newline if any.

    Returns:
        The definition text.
    """
    body = body.rstrip(" ")
    if body and not body.endswith("\n"):
        body += "\n"
    return f"static const {ctype} {name}[{length}] = {{\n{body}}};\n"


def record_field(value, comment):
    return f"{value},\t/* {comment} */\n"


def record_definition(ctype, name, fields):
    """
    Creates a `static const` struct definition with one field per line.

    Args:
        ctype: The struct type.
        name: The symbol name.
        fields: (value text, comment) pairs in member order.
    """
    body = "".join(record_field(value, comment) for value, comment in fields)
    return f"static const {ctype} {name} = {{\n{body}}};\n"


def guarded(guard, body):
    """
    Wraps a definition in an include-once conditional keyed by `guard`.
    """
    return f"#ifndef {guard}\n#define {guard}\n{body}#endif\n\n"
