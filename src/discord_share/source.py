from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from pathlib import Path

_RANGE_RE = re.compile(r"^\s*(\d+)?\s*[:-]\s*(\d+)?\s*$")


@dataclass(frozen=True)
class SourceText:
    """Text picked for sharing, plus where it came from."""

    text: str
    file_name: str
    starting_line: int = 0  # 0-based line offset of the first line of text

    @property
    def base_name(self) -> str:
        return Path(self.file_name).name

    @property
    def extension(self) -> str:
        return Path(self.file_name).suffix.lstrip(".")


def parse_line_range(value: str) -> tuple[int | None, int | None]:
    """Parse ``"10:20"``, ``"10-20"``, ``"10:"``, ``":20"`` or ``"7"`` (1-based, inclusive)."""
    value = value.strip()
    if value.isdigit():
        line = int(value)
        start, end = line, line
    else:
        m = _RANGE_RE.match(value)
        if not m or (m.group(1) is None and m.group(2) is None):
            raise ValueError(f"invalid line range {value!r}; expected START:END")
        start = int(m.group(1)) if m.group(1) else None
        end = int(m.group(2)) if m.group(2) else None
    if start is not None and start < 1:
        raise ValueError("line numbers start at 1")
    if start is not None and end is not None and end < start:
        raise ValueError(f"invalid line range {value!r}; end is before start")
    return start, end


def select_lines(text: str, start: int | None = None, end: int | None = None) -> tuple[str, int]:
    """Return the 1-based inclusive line range of *text* and its 0-based offset."""
    if start is None and end is None:
        return text, 0
    # split on "\n" only, the same way number_lines counts lines
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    first = (start or 1) - 1
    last = len(lines) if end is None else min(end, len(lines))
    selected = lines[first:last]
    # a selection does not carry the line break that ends its last line
    if selected and selected[-1].endswith("\r"):
        selected[-1] = selected[-1][:-1]
    return "\n".join(selected), first


def read_source(
    path: str | Path,
    *,
    start: int | None = None,
    end: int | None = None,
    name: str | None = None,
) -> SourceText:
    """Read a whole file, or a line range of it, for sharing.

    ``"-"`` reads standard input; pass *name* to give it a file name (and
    with it an extension for syntax highlighting).
    """
    if str(path) == "-":
        raw = sys.stdin.read()
        file_name = name or "stdin"
    else:
        raw = Path(path).read_text(encoding="utf-8")
        file_name = name or str(path)
    text, offset = select_lines(raw, start, end)
    return SourceText(text=text, file_name=file_name, starting_line=offset)
