from __future__ import annotations

import dataclasses
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

from discord_share.config import ConfigurationError, options_from_config, webhook_url_from_config
from discord_share.formatter import build_payloads
from discord_share.gateway.webhook import DeliveryError, WebhookClient, dispatch
from discord_share.source import SourceText
from discord_share.types import SHARE_MODE_EMBED, ShareRequest

logger = logging.getLogger(__name__)

# Resolves to the comment text, "" for no comment, or None when the user cancels.
CommentPrompt = Callable[[], Awaitable[str | None]]

OutcomeStatus = Literal["shared", "empty", "cancelled", "error"]


class EmptyContentError(ValueError):
    """There is nothing to share."""


class ShareCancelled(Exception):
    """The user dismissed the comment prompt."""


@dataclass(frozen=True)
class ShareOutcome:
    status: OutcomeStatus
    message: str
    delivered: int = 0

    @property
    def ok(self) -> bool:
        return self.status != "error"


class ShareService:
    """Runs one share action end to end and reports a single outcome.

    Order of checks: content, configuration, comment prompt, formatting,
    delivery. Nothing touches the network until the first three pass.
    """

    def __init__(
        self,
        config: dict,
        *,
        mode: str | None = None,
        show_line_numbers: bool | None = None,
        prompt: CommentPrompt | None = None,
        client_factory: Callable[[str], WebhookClient] = WebhookClient,
    ) -> None:
        self._config = config
        self._mode = mode
        self._show_line_numbers = show_line_numbers
        self._prompt = prompt
        self._client_factory = client_factory

    async def share(self, source: SourceText, *, comment: str | None = None) -> ShareOutcome:
        try:
            return await self._share(source, comment)
        except EmptyContentError as exc:
            logger.info("Nothing to share from %s", source.file_name)
            return ShareOutcome("empty", str(exc))
        except ShareCancelled:
            logger.info("Share of %s cancelled at comment prompt", source.file_name)
            return ShareOutcome("cancelled", "")
        except ConfigurationError as exc:
            logger.info("Share aborted by configuration error: %s", exc)
            return ShareOutcome("error", str(exc))
        except DeliveryError as exc:
            return ShareOutcome(
                "error",
                f"Failed to share to Discord: {exc}",
                delivered=exc.index - 1,
            )

    async def _share(self, source: SourceText, comment: str | None) -> ShareOutcome:
        if not source.text:
            raise EmptyContentError("No content to share.")

        url = webhook_url_from_config(self._config)
        options = options_from_config(self._config, mode=self._mode)
        if self._show_line_numbers is not None:
            options = dataclasses.replace(options, show_line_numbers=self._show_line_numbers)
        client = self._client_factory(url)

        # Comments are only rendered in embeds.
        if (
            comment is None
            and options.ask_for_comment
            and options.mode == SHARE_MODE_EMBED
            and self._prompt is not None
        ):
            answer = await self._prompt()
            if answer is None:
                raise ShareCancelled()
            comment = answer

        request = ShareRequest(
            text=source.text,
            file_extension=source.extension,
            file_base_name=source.base_name,
            starting_line=source.starting_line,
            options=options,
            comment=(comment or "").strip() or None,
        )
        payloads = build_payloads(request)
        logger.info(
            "Sharing %s (%d chars) as %d %s payload(s) to %s",
            source.base_name,
            len(source.text),
            len(payloads),
            options.mode,
            client.safe_url,
        )
        delivered = await dispatch(client, payloads)

        kind = "an embed" if options.mode == SHARE_MODE_EMBED else "a message"
        message = f"Successfully shared to Discord as {kind}."
        if delivered > 1:
            message = f"Successfully shared to Discord as {kind} in {delivered} parts."
        return ShareOutcome("shared", message, delivered=delivered)
