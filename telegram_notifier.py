"""
Telegram Notifier - Digest delivery
Dispatch digest messages to Telegram with:
- MarkdownV2 formatting, link previews disabled
- One plain-text fallback when Telegram rejects the message
- Delivery stats (sent / fallback_sent / failed)
"""
import logging
import re

from telegram import Bot, LinkPreviewOptions
from telegram.constants import ParseMode
from telegram.error import BadRequest, NetworkError, TelegramError

from config import TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID

logger = logging.getLogger(__name__)

# [label](url) | \x | bare * or _ marker
_MARKUP_RE = re.compile(
    r"\[((?:\\.|[^\]\\])*)\]\(((?:\\.|[^)\\])*)\)"
    r"|\\(.)"
    r"|[*_]",
    re.DOTALL,
)
_UNESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _strip_match(match) -> str:
    label, url, escaped = match.group(1), match.group(2), match.group(3)
    if label is not None:
        target = _UNESCAPE_RE.sub(r"\1", url)
        return f"{strip_markup(label)}: {target}"
    if escaped is not None:
        return escaped
    return ""


def strip_markup(text: str) -> str:
    """
    MarkdownV2 -> readable plain text.

    [label](url) becomes "label: url", unescaped * and _ markers are
    dropped and backslash escapes are resolved.
    """
    return _MARKUP_RE.sub(_strip_match, text)


class TelegramNotifier:
    """
    Telegram delivery client for digest messages.

    Disabled (every send returns False) when the bot token or chat id is
    missing.
    """

    def __init__(self, bot_token: str = None, chat_id: str = None, bot: Bot = None):
        self.bot_token = TELEGRAM_BOT_TOKEN if bot_token is None else bot_token
        self.chat_id = TELEGRAM_CHAT_ID if chat_id is None else chat_id
        self.enabled = bool(self.bot_token and self.chat_id)

        if bot is not None:
            self.bot = bot
        elif self.enabled:
            self.bot = Bot(token=self.bot_token)
        else:
            self.bot = None

        self.stats = {
            'sent': 0,
            'fallback_sent': 0,
            'failed': 0,
        }

    async def send_message_async(self, message: str) -> bool:
        """
        Send a MarkdownV2 message, falling back once to plain text when
        Telegram rejects it. Transport failures (NetworkError, TimedOut) are
        not retried.

        Returns:
            True if either attempt was delivered
        """
        if not self.enabled or self.bot is None:
            logger.error("[TELEGRAM] Credentials not configured, message dropped")
            self.stats['failed'] += 1
            return False

        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=message,
                parse_mode=ParseMode.MARKDOWN_V2,
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
            self.stats['sent'] += 1
            return True
        except BadRequest as e:
            logger.warning(f"[TELEGRAM] Markup rejected ({e}), retrying as plain text")
        except NetworkError as e:
            # BadRequest subclasses NetworkError, so it is caught above
            logger.error(f"[TELEGRAM] Send error: {e}")
            self.stats['failed'] += 1
            return False
        except TelegramError as e:
            logger.warning(f"[TELEGRAM] Send rejected ({type(e).__name__}: {e}), retrying as plain text")

        return await self._send_plain(message)

    async def _send_plain(self, message: str) -> bool:
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=strip_markup(message),
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
            self.stats['fallback_sent'] += 1
            return True
        except TelegramError as e:
            logger.error(f"[TELEGRAM] Plain-text fallback failed: {e}")
            self.stats['failed'] += 1
            return False

    async def close(self):
        if self.bot is not None:
            try:
                await self.bot.shutdown()
            except TelegramError as e:
                logger.warning(f"[TELEGRAM] Shutdown error: {e}")

    def get_stats(self) -> dict:
        return dict(self.stats)
