import json
from unittest.mock import AsyncMock

import pytest

from discord_share.config import WEBHOOK_URL_ENV
from discord_share.gateway.webhook import WebhookClient
from discord_share.service import ShareService
from discord_share.source import SourceText

URL = "https://discord.com/api/webhooks/123/abc"


class _Recorder:
    """Client factory that records every request instead of sending it."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.sent: list[dict] = []
        self.urls: list[str] = []

    def __call__(self, url):
        self.urls.append(url)
        client = WebhookClient(url)
        client._post_json = self._post  # type: ignore[method-assign]
        return client

    def _post(self, body):
        self.sent.append(json.loads(body))
        return self.responses.pop(0) if self.responses else (204, "")


def _config(**section):
    return {"discord_share": {"webhook_url": URL, **section}}


def _source(text="print('hi')\n", name="src/main.py", starting_line=0):
    return SourceText(text=text, file_name=name, starting_line=starting_line)


@pytest.mark.asyncio
async def test_share_embed_success():
    recorder = _Recorder()
    service = ShareService(_config(), client_factory=recorder)

    outcome = await service.share(_source())

    assert outcome.status == "shared"
    assert outcome.ok
    assert outcome.message == "Successfully shared to Discord as an embed."
    assert outcome.delivered == 1
    assert recorder.urls == [URL]
    embed = recorder.sent[0]["embeds"][0]
    assert embed["title"] == "Python"
    assert embed["description"].startswith("**main.py**\n```py\n")


@pytest.mark.asyncio
async def test_share_message_mode_uses_content():
    recorder = _Recorder()
    service = ShareService(_config(mode="message"), client_factory=recorder)

    outcome = await service.share(_source("Hello World", name="notes.txt"))

    assert outcome.message == "Successfully shared to Discord as a message."
    assert recorder.sent == [{"content": "File: notes.txt\n```txt\nHello World\n```"}]


@pytest.mark.asyncio
async def test_mode_override_beats_config():
    recorder = _Recorder()
    service = ShareService(_config(mode="embed"), mode="message", client_factory=recorder)
    await service.share(_source("x"))
    assert "content" in recorder.sent[0]


@pytest.mark.asyncio
async def test_empty_content_is_informational():
    recorder = _Recorder()
    service = ShareService(_config(), client_factory=recorder)

    outcome = await service.share(_source(""))

    assert outcome.status == "empty"
    assert outcome.ok
    assert outcome.message == "No content to share."
    assert recorder.urls == []


@pytest.mark.asyncio
async def test_missing_webhook_fails_before_any_request(monkeypatch):
    monkeypatch.delenv(WEBHOOK_URL_ENV, raising=False)
    recorder = _Recorder()
    prompt = AsyncMock(return_value="comment")
    service = ShareService({"discord_share": {"ask_for_comment": True}}, prompt=prompt, client_factory=recorder)

    outcome = await service.share(_source())

    assert outcome.status == "error"
    assert not outcome.ok
    assert "webhook URL not configured" in outcome.message
    assert recorder.urls == []
    assert recorder.sent == []
    prompt.assert_not_awaited()


@pytest.mark.asyncio
async def test_webhook_url_from_environment(monkeypatch):
    monkeypatch.setenv(WEBHOOK_URL_ENV, URL)
    recorder = _Recorder()
    service = ShareService({}, client_factory=recorder)

    outcome = await service.share(_source())

    assert outcome.status == "shared"
    assert recorder.urls == [URL]


@pytest.mark.asyncio
async def test_invalid_webhook_url_is_configuration_error():
    service = ShareService({"discord_share": {"webhook_url": "not a url"}})
    outcome = await service.share(_source())
    assert outcome.status == "error"
    assert "Invalid webhook URL" in outcome.message


@pytest.mark.asyncio
async def test_cancelled_prompt_sends_nothing():
    recorder = _Recorder()
    prompt = AsyncMock(return_value=None)
    service = ShareService(_config(ask_for_comment=True), prompt=prompt, client_factory=recorder)

    outcome = await service.share(_source())

    assert outcome.status == "cancelled"
    assert outcome.ok
    assert outcome.message == ""
    assert recorder.sent == []
    prompt.assert_awaited_once()


@pytest.mark.asyncio
async def test_prompt_comment_is_attached():
    recorder = _Recorder()
    prompt = AsyncMock(return_value="  please review  ")
    service = ShareService(_config(ask_for_comment=True), prompt=prompt, client_factory=recorder)

    await service.share(_source())

    fields = recorder.sent[0]["embeds"][0]["fields"]
    assert fields == [{"name": "Comment", "value": "please review", "inline": False}]


@pytest.mark.asyncio
async def test_blank_prompt_answer_means_no_comment():
    recorder = _Recorder()
    service = ShareService(
        _config(ask_for_comment=True), prompt=AsyncMock(return_value=""), client_factory=recorder
    )

    outcome = await service.share(_source())

    assert outcome.status == "shared"
    assert "fields" not in recorder.sent[0]["embeds"][0]


@pytest.mark.asyncio
async def test_explicit_comment_skips_prompt():
    recorder = _Recorder()
    prompt = AsyncMock(return_value=None)
    service = ShareService(_config(ask_for_comment=True), prompt=prompt, client_factory=recorder)

    outcome = await service.share(_source(), comment="from the command line")

    assert outcome.status == "shared"
    prompt.assert_not_awaited()
    assert recorder.sent[0]["embeds"][0]["fields"][0]["value"] == "from the command line"


@pytest.mark.asyncio
async def test_prompt_skipped_in_message_mode():
    recorder = _Recorder()
    prompt = AsyncMock(return_value=None)
    service = ShareService(_config(ask_for_comment=True, mode="message"), prompt=prompt, client_factory=recorder)

    outcome = await service.share(_source())

    assert outcome.status == "shared"
    prompt.assert_not_awaited()


@pytest.mark.asyncio
async def test_multi_part_share_reports_part_count():
    recorder = _Recorder()
    service = ShareService(_config(mode="message", limits={"message": 60}), client_factory=recorder)

    outcome = await service.share(_source("y" * 100))

    assert outcome.status == "shared"
    assert outcome.delivered == len(recorder.sent) > 1
    assert f"in {outcome.delivered} parts" in outcome.message


@pytest.mark.asyncio
async def test_partial_delivery_failure_reports_failing_chunk():
    recorder = _Recorder(responses=[(204, ""), (500, "server exploded")])
    service = ShareService(_config(mode="message", limits={"message": 40}, show_file_name=False), client_factory=recorder)

    # 40 - 10 (fence) - 11 ("(Part 3/3)\n") leaves 19 chars per part
    outcome = await service.share(_source("w" * 57, name="a.md"))

    assert outcome.status == "error"
    assert len(recorder.sent) == 2
    assert outcome.delivered == 1
    assert "chunk 2 of 3" in outcome.message
    assert "server exploded" in outcome.message


@pytest.mark.asyncio
async def test_limit_below_overhead_is_configuration_error():
    recorder = _Recorder()
    service = ShareService(_config(limits={"embed": 5}), client_factory=recorder)

    outcome = await service.share(_source())

    assert outcome.status == "error"
    assert "no room for content" in outcome.message
    assert recorder.sent == []


@pytest.mark.asyncio
async def test_line_number_override_uses_selection_offset():
    recorder = _Recorder()
    service = ShareService(_config(), show_line_numbers=True, client_factory=recorder)

    await service.share(_source("a\nb", starting_line=5))

    assert "   6 | a\n   7 | b" in recorder.sent[0]["embeds"][0]["description"]


@pytest.mark.asyncio
async def test_malformed_webhook_url_becomes_error_outcome():
    service = ShareService({"discord_share": {"webhook_url": "https://[::1/api/webhooks/1/t"}})

    outcome = await service.share(_source("x", name="a.py"))

    assert outcome.status == "error"
    assert "Invalid webhook URL" in outcome.message
