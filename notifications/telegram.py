"""Telegram delivery for screening reports and fatal errors."""
from __future__ import annotations

import logging
from typing import Optional

import requests
from requests.exceptions import RequestException

TELEGRAM_API_URL = "https://api.telegram.org"


class NotificationError(RuntimeError):
    """Raised when a Telegram message could not be delivered."""


def send_telegram_message(
    bot_token: Optional[str],
    chat_id: Optional[str],
    text: str,
    parse_mode: Optional[str] = None,
    timeout: float = 10.0,
) -> bool:
    """Send ``text`` to a Telegram chat.

    Args:
        bot_token: Bot API token.
        chat_id: Destination chat.
        text: Message body.
        parse_mode: Optional Telegram parse mode ("Markdown", "HTML").
        timeout: Request timeout in seconds.

    Returns:
        True when sent, False when credentials are missing.

    Raises:
        NotificationError: If the Bot API rejects the request or is unreachable.
    """
    if not bot_token or not chat_id:
        logging.info("Telegram credentials missing; message not sent.")
        return False

    url = f"{TELEGRAM_API_URL}/bot{bot_token}/sendMessage"
    payload = {
        "chat_id": chat_id,
        "text": text,
        "disable_web_page_preview": True,
    }
    if parse_mode:
        payload["parse_mode"] = parse_mode

    try:
        response = requests.post(url, json=payload, timeout=timeout)
    except RequestException as exc:
        raise NotificationError(f"Telegram send error: {exc}") from exc
    if not response.ok:
        raise NotificationError(
            f"Telegram send failed ({response.status_code}): {response.text[:200]}"
        )
    return True


def notify_error(bot_token: Optional[str], chat_id: Optional[str], message: str) -> None:
    """Forward a fatal error to Telegram, logging instead if delivery fails."""
    text = f"ERROR: {message}"
    try:
        sent = send_telegram_message(bot_token, chat_id, text)
    except NotificationError as exc:
        logging.error("telegram send failed: %s (%s)", text, exc)
        return
    if not sent:
        logging.error(text)
