"""Reading and writing the indented tree format used for levels and assets.

A document is a tree of dictionaries, arrays and string values.  Each line
is indented by two spaces per level and carries one of the tags
``!<DICT>``, ``!<ARRAY>`` or ``!<VALUE> text``; entries of a dictionary are
prefixed with ``key: ``.  Lines starting with ``//`` are comments.  The root
of a document is always a dictionary.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

ARRAY_TAG = "!<ARRAY>"
DICT_TAG = "!<DICT>"
VALUE_TAG = "!<VALUE>"
COMMENT_PREFIX = "//"
INDENT = "  "

Value = Union[str, List["Value"], Dict[str, "Value"]]

PathLike = Union[str, Path]


class ValueStorageError(ValueError):
    """A document or value that does not fit the storage format."""


def loads(text: str) -> Value:
    """Parse a document into nested dicts, lists and strings."""
    stack: List[Tuple[Optional[str], Value]] = []

    def finish(lineno: int) -> None:
        if len(stack) < 2:
            raise ValueStorageError(f"line {lineno}: value outside of any container")
        key, value = stack.pop()
        parent = stack[-1][1]
        if isinstance(parent, list):
            parent.append(value)
        elif isinstance(parent, dict):
            parent.setdefault(key, value)
        else:
            raise ValueStorageError(f"line {lineno}: a plain value cannot hold children")

    def process(view: str, key: Optional[str], lineno: int) -> None:
        if view.startswith(ARRAY_TAG):
            stack.append((key, []))
        elif view.startswith(DICT_TAG):
            stack.append((key, {}))
        elif view.startswith(VALUE_TAG):
            stack.append((key, view[len(VALUE_TAG) + 1:]))
            finish(lineno)
        else:
            raise ValueStorageError(f"line {lineno}: unknown tag in {view!r}")

    for lineno, line in enumerate(text.splitlines(), start=1):
        indent = len(line) - len(line.lstrip(" "))
        if indent % 2:
            raise ValueStorageError(f"line {lineno}: odd indentation")
        depth = indent // 2
        if depth > len(stack):
            raise ValueStorageError(f"line {lineno}: indentation too deep")

        view = line[indent:]
        if view.startswith(COMMENT_PREFIX):
            continue

        while depth < len(stack):
            finish(lineno)

        if not stack:
            process(view, None, lineno)
            continue

        top = stack[-1][1]
        if isinstance(top, list):
            process(view, None, lineno)
        elif isinstance(top, dict):
            colon = view.find(":")
            if colon < 0:
                raise ValueStorageError(f"line {lineno}: dictionary entry without a key")
            process(view[colon + 2:], view[:colon], lineno)
        else:
            raise ValueStorageError(f"line {lineno}: a plain value cannot hold children")

    last_line = len(text.splitlines())
    while len(stack) > 1:
        finish(last_line)
    if not stack:
        raise ValueStorageError("empty document")
    return stack[0][1]


def _write(out: List[str], value: Value, depth: int, key: Optional[str]) -> None:
    prefix = INDENT * depth
    if key is not None:
        if not isinstance(key, str):
            raise ValueStorageError(f"dictionary keys must be strings, not {type(key).__name__}")
        prefix += f"{key}: "

    if isinstance(value, list):
        out.append(f"{prefix}{ARRAY_TAG}\n")
        for item in value:
            _write(out, item, depth + 1, None)
    elif isinstance(value, dict):
        out.append(f"{prefix}{DICT_TAG}\n")
        for child_key, child in value.items():
            _write(out, child, depth + 1, child_key)
    elif isinstance(value, str):
        out.append(f"{prefix}{VALUE_TAG} {value}\n")
    else:
        raise ValueStorageError(f"cannot store a value of type {type(value).__name__}")


def dumps(value: Value) -> str:
    """Render a tree whose root is a dictionary as a document."""
    if not isinstance(value, dict):
        raise ValueStorageError("the root of a document must be a dictionary")
    out: List[str] = []
    _write(out, value, 0, None)
    return "".join(out)


def load(path: PathLike) -> Value:
    """Read and parse a document file."""
    return loads(Path(path).read_text(encoding="utf-8"))


def save(value: Value, path: PathLike) -> None:
    """Write a tree to a document file, replacing its contents."""
    Path(path).write_text(dumps(value), encoding="utf-8")