from __future__ import annotations

import asyncio
import http.client
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Sequence
from dataclasses import dataclass

from discord_share import __version__
from discord_share.config import ConfigurationError
from discord_share.types import Payload

logger = logging.getLogger(__name__)

SUCCESS_STATUS = 204


class DeliveryError(RuntimeError):
    """A payload was rejected or could not be sent; later payloads were skipped."""

    def __init__(self, index: int, total: int, reason: str, status: int | None = None) -> None:
        self.index = index  # 1-based
        self.total = total
        self.reason = reason
        self.status = status
        super().__init__(f"failed at chunk {index} of {total}: {reason}")


@dataclass(frozen=True)
class DeliveryResult:
    ok: bool
    status: int | None = None
    reason: str = ""


def sanitize_webhook_url(url: str) -> str:
    """Mask the webhook token (last path segment) so the URL is safe to log."""
    parts = urllib.parse.urlsplit(url)
    head, sep, _token = parts.path.rstrip("/").rpartition("/")
    if not sep or not head:
        return f"{parts.scheme}://{parts.netloc}{parts.path}"
    return f"{parts.scheme}://{parts.netloc}{head}/***"


class WebhookClient:
    """Posts JSON bodies to a single Discord webhook URL."""

    def __init__(self, url: str) -> None:
        expected = "expected https://discord.com/api/webhooks/<id>/<token>"
        try:
            parts = urllib.parse.urlsplit(url.strip())
            parts.port  # raises ValueError for a malformed or out-of-range port
        except ValueError as exc:
            raise ConfigurationError(f"Invalid webhook URL ({exc}); {expected}") from exc
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ConfigurationError(f"Invalid webhook URL; {expected}")
        self._url = urllib.parse.urlunsplit(parts)
        self._host = parts.netloc
        self._path = parts.path or "/"
        if parts.query:
            self._path = f"{self._path}?{parts.query}"

    @property
    def host(self) -> str:
        return self._host

    @property
    def path(self) -> str:
        return self._path

    @property
    def safe_url(self) -> str:
        return sanitize_webhook_url(self._url)

    async def post_json(self, body: bytes) -> tuple[int, str]:
        """POST *body* and return ``(status, response_text)``.

        HTTP error statuses are returned, not raised. Transport failures
        propagate as ``OSError`` / ``http.client.HTTPException``.
        """
        return await asyncio.to_thread(self._post_json, body)

    def _post_json(self, body: bytes) -> tuple[int, str]:
        req = urllib.request.Request(
            url=self._url,
            data=body,
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"discord-share/{__version__}",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(req) as resp:
                return resp.status, resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            return exc.code, detail


async def deliver(client: WebhookClient, payload: Payload) -> DeliveryResult:
    """Send one payload. Only status 204 counts as success."""
    try:
        status, text = await client.post_json(payload.to_json())
    except (OSError, http.client.HTTPException) as exc:
        return DeliveryResult(ok=False, reason=f"{type(exc).__name__}: {exc}")

    if status == SUCCESS_STATUS:
        return DeliveryResult(ok=True, status=status)
    reason = f"status code {status}"
    if text.strip():
        reason = f"{reason}: {text.strip()[:300]}"
    return DeliveryResult(ok=False, status=status, reason=reason)


async def dispatch(client: WebhookClient, payloads: Sequence[Payload]) -> int:
    """Deliver *payloads* one at a time, in order.

    Stops at the first failure and raises ``DeliveryError``; payloads
    already delivered stay delivered. Returns the number delivered.
    """
    total = len(payloads)
    for payload in payloads:
        result = await deliver(client, payload)
        if not result.ok:
            logger.warning(
                "Webhook delivery failed url=%s chunk=%d/%d status=%s reason=%s",
                client.safe_url,
                payload.index + 1,
                total,
                result.status,
                result.reason,
            )
            raise DeliveryError(payload.index + 1, total, result.reason, status=result.status)
        logger.info("Delivered chunk %d/%d to %s", payload.index + 1, total, client.safe_url)
    return total
