from __future__ import annotations

import getpass
import logging
from datetime import datetime, timezone

import discord

from discord_share import TOOL_NAME, __version__
from discord_share.config import ConfigurationError
from discord_share.languages import display_name
from discord_share.types import SHARE_MODE_EMBED, Chunk, Payload, ShareRequest
from discord_share.utils.chunker import chunk_text, number_lines

logger = logging.getLogger(__name__)

ANONYMOUS_AUTHOR = "Anonymous"
COMMENT_FIELD_NAME = "Comment"
# Discord limits
EMBED_FIELD_VALUE_MAX_LENGTH = 1024
EMBED_AUTHOR_MAX_LENGTH = 256
WEBHOOK_USERNAME_MAX_LENGTH = 80


def code_block(body: str, extension: str) -> str:
    return f"```{extension}\n{body}\n```"


def part_label(index: int, total: int) -> str:
    """``"Part 2/3"`` for multi-part shares, empty for a single part."""
    return f"Part {index + 1}/{total}" if total > 1 else ""


def resolve_author(author_name: str | None) -> str:
    """Configured author name, else the OS user, else ``"Anonymous"``."""
    if author_name and author_name.strip():
        return author_name.strip()
    try:
        user = getpass.getuser()
    except (OSError, KeyError, ImportError):
        user = ""
    return user.strip() or ANONYMOUS_AUTHOR


def _file_name_line(request: ShareRequest) -> str:
    if not (request.options.show_file_name and request.file_base_name):
        return ""
    return f"**{request.file_base_name}**\n"


def _message_header(request: ShareRequest, index: int, total: int) -> str:
    parts = []
    if request.options.show_file_name and request.file_base_name:
        parts.append(f"File: {request.file_base_name}")
    label = part_label(index, total)
    if label:
        parts.append(f"({label})")
    return " ".join(parts) + "\n" if parts else ""


def wrapper_overhead(request: ShareRequest, total: int = 1) -> int:
    """Characters of fixed decoration around each chunk body.

    In message mode the part marker is part of the content, so the widest
    marker for *total* parts is reserved. A configured overhead only ever
    raises the reservation.
    """
    fence = len(code_block("", request.file_extension))
    if request.options.mode == SHARE_MODE_EMBED:
        decoration = len(_file_name_line(request))
    else:
        decoration = len(_message_header(request, total - 1, total))
    computed = fence + decoration
    configured = request.options.wrapper_overhead_length
    return computed if configured is None else max(configured, computed)


def split_text(request: ShareRequest, text: str) -> list[Chunk]:
    """Chunk *text* so every formatted payload fits ``max_payload_length``.

    Re-chunks while the reserved part marker grows with the chunk count.
    """
    total = 1
    while True:
        overhead = wrapper_overhead(request, total)
        limit = request.options.max_payload_length - overhead
        if limit <= 0:
            raise ConfigurationError(
                f"Payload limit {request.options.max_payload_length} leaves no room for content "
                f"after {overhead} characters of formatting"
            )
        chunks = chunk_text(text, limit)
        if len(chunks) <= total:
            return chunks
        total = len(chunks)


def _embed_payload(
    request: ShareRequest,
    chunk: Chunk,
    *,
    timestamp: datetime,
    author: str | None,
) -> Payload:
    title = display_name(request.file_extension)
    label = part_label(chunk.index, chunk.total)
    if label:
        title = f"{title} ({label})"

    embed = discord.Embed(
        title=title,
        description=_file_name_line(request) + code_block(chunk.body, request.file_extension),
        colour=request.options.color,
        timestamp=timestamp,
    )
    embed.set_footer(text=f"{TOOL_NAME} v{__version__}")
    if author:
        embed.set_author(name=author[:EMBED_AUTHOR_MAX_LENGTH])
    if chunk.index == 0 and request.comment:
        embed.add_field(
            name=COMMENT_FIELD_NAME,
            value=request.comment[:EMBED_FIELD_VALUE_MAX_LENGTH],
            inline=False,
        )
    return Payload(index=chunk.index, total=chunk.total, data={"embeds": [embed.to_dict()]})


def _message_payload(request: ShareRequest, chunk: Chunk, *, author: str | None) -> Payload:
    content = _message_header(request, chunk.index, chunk.total) + code_block(
        chunk.body, request.file_extension
    )
    data: dict = {"content": content}
    if author:
        data["username"] = author[:WEBHOOK_USERNAME_MAX_LENGTH]
    return Payload(index=chunk.index, total=chunk.total, data=data)


def build_payloads(request: ShareRequest, *, now: datetime | None = None) -> list[Payload]:
    """Turn a share request into webhook payloads, in delivery order.

    Line numbers are applied before chunking, so numbering stays absolute
    even when a chunk boundary falls mid-line. Every payload in one share
    carries the same timestamp.
    """
    if not request.text:
        raise ValueError("cannot format empty text")

    options = request.options
    text = number_lines(request.text, request.starting_line) if options.show_line_numbers else request.text
    chunks = split_text(request, text)
    author = resolve_author(options.author_name) if options.show_author else None

    if options.mode == SHARE_MODE_EMBED:
        timestamp = now or datetime.now(timezone.utc)
        payloads = [_embed_payload(request, c, timestamp=timestamp, author=author) for c in chunks]
    else:
        payloads = [_message_payload(request, c, author=author) for c in chunks]

    logger.debug(
        "Formatted %s (%d chars) into %d %s payload(s)",
        request.file_base_name or "<untitled>",
        len(text),
        len(payloads),
        options.mode,
    )
    return payloads
