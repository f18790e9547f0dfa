from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

SHARE_MODE_EMBED = "embed"
SHARE_MODE_MESSAGE = "message"

ShareMode = Literal["embed", "message"]

# Discord rejects embed descriptions over 4096 chars and message content over 2000.
EMBED_MAX_LENGTH = 4096
MESSAGE_MAX_LENGTH = 2000
DEFAULT_EMBED_COLOR = 0x0099FF


@dataclass(frozen=True)
class ShareOptions:
    mode: ShareMode = "embed"
    show_line_numbers: bool = False
    show_author: bool = False
    author_name: str | None = None
    max_payload_length: int = EMBED_MAX_LENGTH
    # None means "derive from the decoration actually emitted"
    wrapper_overhead_length: int | None = None
    show_file_name: bool = True
    color: int = DEFAULT_EMBED_COLOR
    ask_for_comment: bool = False


@dataclass(frozen=True)
class ShareRequest:
    """Everything the formatter needs for one share action."""

    text: str
    file_extension: str
    file_base_name: str
    starting_line: int
    options: ShareOptions
    comment: str | None = None


@dataclass(frozen=True)
class Chunk:
    index: int  # 0-based
    total: int
    body: str


@dataclass(frozen=True)
class Payload:
    """A single webhook request body, ready to be posted."""

    index: int
    total: int
    data: dict[str, Any]

    @property
    def position(self) -> str:
        return f"{self.index + 1}/{self.total}"

    def to_json(self) -> bytes:
        return json.dumps(self.data, ensure_ascii=False).encode("utf-8")
