"""Cycle notifications: Slack, Discord and Telegram webhooks.

Fires notifications on:
- Pull request checks failing
- Remediation pull requests being opened
- A whole cycle failing (remote API down, checkpoint unwritable)

Each channel is a no-op unless its toggle is on and it is configured.
Webhook calls never raise; failures are logged.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any

import httpx

from prgate.config import settings

logger = logging.getLogger(__name__)


class NotifyLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


# Emoji/icon mapping
_EMOJI = {
    NotifyLevel.INFO: "ℹ️",
    NotifyLevel.WARNING: "⚠️",
    NotifyLevel.CRITICAL: "🔴",
}


class NotificationManager:
    """Central dispatcher for Slack / Discord / Telegram notifications."""

    def __init__(
        self,
        slack_webhook: str = "",
        discord_webhook: str = "",
        telegram_token: str = "",
        telegram_chat_id: str = "",
        slack: bool | None = None,
        discord: bool | None = None,
        telegram: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        use_slack = settings.notify_slack if slack is None else slack
        use_discord = settings.notify_discord if discord is None else discord
        use_telegram = settings.notify_telegram if telegram is None else telegram

        self.slack_webhook = (slack_webhook or settings.slack_webhook_url) if use_slack else ""
        self.discord_webhook = (discord_webhook or settings.discord_webhook_url) if use_discord else ""
        if use_telegram:
            self.telegram_token = telegram_token or settings.telegram_bot_token
            self.telegram_chat_id = telegram_chat_id or settings.telegram_chat_id
        else:
            self.telegram_token = ""
            self.telegram_chat_id = ""
        self._transport = transport
        self._enabled = bool(
            self.slack_webhook or self.discord_webhook
            or (self.telegram_token and self.telegram_chat_id)
        )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def status(self) -> dict[str, Any]:
        return {
            "enabled": self._enabled,
            "slack_configured": bool(self.slack_webhook),
            "discord_configured": bool(self.discord_webhook),
            "telegram_configured": bool(self.telegram_token and self.telegram_chat_id),
        }

    # -- High-level notification methods ------------------------------------

    async def notify_checks_failed(self, pr_number: int, errors: list[str]) -> None:
        level = NotifyLevel.WARNING
        detail = "\n".join(f"• {e}" for e in errors[:5]) or "• (no detail)"
        text = f"{_EMOJI[level]} *Checks failed* on PR #{pr_number}\n{detail}\n"
        await self._send(text, level)

    async def notify_remediation_opened(self, pr_number: int, url: str) -> None:
        level = NotifyLevel.INFO
        text = f"{_EMOJI[level]} *Remediation opened* for PR #{pr_number}\n{url}\n"
        await self._send(text, level)

    async def notify_cycle_failed(self, error: str) -> None:
        level = NotifyLevel.CRITICAL
        text = f"{_EMOJI[level]} *PR monitor cycle failed*\nDetail: {error[:500]}\n"
        await self._send(text, level)

    # -- Low-level dispatch -------------------------------------------------

    async def _send(self, text: str, level: NotifyLevel) -> None:
        """Dispatch to all configured channels."""
        if not self._enabled:
            return
        tasks = []
        if self.slack_webhook:
            tasks.append(self._post(
                "Slack", self.slack_webhook, {"text": text, "mrkdwn": True},
            ))
        if self.discord_webhook:
            tasks.append(self._post(
                "Discord", self.discord_webhook, {"content": text},
            ))
        if self.telegram_token and self.telegram_chat_id:
            tasks.append(self._post(
                "Telegram",
                f"https://api.telegram.org/bot{self.telegram_token}/sendMessage",
                {"chat_id": self.telegram_chat_id, "text": text, "parse_mode": "Markdown"},
            ))
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _post(self, channel: str, url: str, payload: dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
                resp = await client.post(url, json=payload)
                if resp.status_code >= 300:
                    logger.warning("%s returned %d: %s", channel, resp.status_code, resp.text[:200])
        except httpx.HTTPError as exc:
            logger.warning("%s notification failed: %s", channel, exc)
