from __future__ import annotations

from discord_share.types import Chunk

LINE_NUMBER_WIDTH = 4
LINE_NUMBER_SEPARATOR = " | "


def number_lines(text: str, starting_line: int = 0) -> str:
    """Prefix every line of *text* with its absolute 1-based line number.

    *starting_line* is the 0-based offset of the first line in the document,
    so a selection starting on the sixth line passes ``5``.
    """
    lines = text.split("\n")
    return "\n".join(
        f"{starting_line + i + 1:>{LINE_NUMBER_WIDTH}}{LINE_NUMBER_SEPARATOR}{line}"
        for i, line in enumerate(lines)
    )


def chunk_text(text: str, max_size: int) -> list[Chunk]:
    """Hard-cut *text* into consecutive chunks of at most *max_size* characters.

    Chunks are maximal except the last one, so joining the bodies gives back
    *text* unchanged. Lines may be split across chunks.
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be > 0, got {max_size}")
    if not text:
        raise ValueError("cannot chunk empty text")

    bodies = [text[start : start + max_size] for start in range(0, len(text), max_size)]
    total = len(bodies)
    return [Chunk(index=i, total=total, body=body) for i, body in enumerate(bodies)]
