"""Tests for webhook notifications."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import patch

import httpx

from prgate.notifications import NotificationManager


def _recording_transport(sent: list[tuple[str, dict[str, Any]]], status: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        sent.append((str(request.url), json.loads(request.content)))
        return httpx.Response(status, text="ok")

    return httpx.MockTransport(handler)


class TestNotificationManager:
    def test_disabled_is_noop(self) -> None:
        sent: list[tuple[str, dict[str, Any]]] = []
        mgr = NotificationManager(
            slack_webhook="https://hooks.slack.test/x",
            slack=False, discord=False, telegram=False,
            transport=_recording_transport(sent),
        )
        assert not mgr.is_enabled
        asyncio.run(mgr.notify_checks_failed(1, ["Build: exit code 1"]))
        assert sent == []
        assert mgr.status() == {
            "enabled": False,
            "slack_configured": False,
            "discord_configured": False,
            "telegram_configured": False,
        }

    def test_toggle_without_url_is_noop(self) -> None:
        with patch("prgate.notifications.settings") as mock_settings:
            mock_settings.slack_webhook_url = ""
            mgr = NotificationManager(slack=True, discord=False, telegram=False)
        assert not mgr.is_enabled

    def test_slack_payload(self) -> None:
        sent: list[tuple[str, dict[str, Any]]] = []
        mgr = NotificationManager(
            slack_webhook="https://hooks.slack.test/x",
            slack=True, discord=False, telegram=False,
            transport=_recording_transport(sent),
        )
        asyncio.run(mgr.notify_remediation_opened(42, "https://github.com/acme/app/pull/43"))
        assert len(sent) == 1
        url, payload = sent[0]
        assert url == "https://hooks.slack.test/x"
        assert "PR #42" in payload["text"]
        assert "pull/43" in payload["text"]

    def test_all_channels(self) -> None:
        sent: list[tuple[str, dict[str, Any]]] = []
        mgr = NotificationManager(
            slack_webhook="https://hooks.slack.test/x",
            discord_webhook="https://discord.test/hook",
            telegram_token="123:abc",
            telegram_chat_id="99",
            slack=True, discord=True, telegram=True,
            transport=_recording_transport(sent),
        )
        asyncio.run(mgr.notify_cycle_failed("GitHub API unreachable: timed out"))
        urls = sorted(url for url, _ in sent)
        assert urls == [
            "https://api.telegram.org/bot123:abc/sendMessage",
            "https://discord.test/hook",
            "https://hooks.slack.test/x",
        ]

    def test_webhook_errors_swallowed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        mgr = NotificationManager(
            discord_webhook="https://discord.test/hook",
            slack=False, discord=True, telegram=False,
            transport=httpx.MockTransport(handler),
        )
        asyncio.run(mgr.notify_checks_failed(3, []))
