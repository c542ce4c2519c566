"""
Telegram message and command handlers.

ARCHITECTURE: Thin gateway - NO analysis logic here!
- Parse command / forwarded message
- Classify and record the request in the chat session
- Hand off to the workflow service (fire-and-forget)
- Reports come back later through the sendTelegramMessage capability

COMMANDS:
=========
/start   - welcome text
/help    - command list
/check   - classify content and start the matching analysis workflow
/report  - acknowledge a scam report (logged only, nothing is persisted)
/history - last 5 analyses for this chat, newest first

Forwarded messages are analyzed automatically with the message pipeline,
after an immediate warning when known scam phrasing is detected.
"""

import re

from telegram import Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from cryptoverifier.agents.schemas import ContentCategory
from cryptoverifier.logging_config import get_logger
from cryptoverifier.services import workflow
from cryptoverifier.utils.validators import scan_for_scam_patterns
from .context import get_session_store

logger = get_logger("telegram_bot")

HISTORY_SIZE = 5
HISTORY_CONTENT_PREVIEW = 50
FORWARDED_NOTE = "Forwarded message"

CHECK_USAGE = "Please provide content to check. Example: /check https://example.com"
REPORT_USAGE = "Please provide content to report. Example: /report https://scam-site.com"

ANALYZING_TEXT = {
    ContentCategory.URL: "Analyzing URL (ID: {id}). This may take a few moments...",
    ContentCategory.TOKEN: "Analyzing token address (ID: {id}). This may take a few moments...",
    ContentCategory.MESSAGE: "Analyzing message content (ID: {id}). This may take a few moments...",
}

WELCOME_TEXT = """Welcome to CryptoVerifier Bot! 🛡️

I'll help protect you from crypto scams, phishing attempts, and fraudulent projects.

Use /check followed by a URL, token address, or message to scan for potential threats."""

HELP_TEXT = """CryptoVerifier Bot Help 🔍

Commands:
/start - Start the bot
/help - Show this help message
/check [content] - Check a URL, token address, or message for scams
/report [content] - Report a scam
/history - View your analysis history

You can also forward suspicious messages directly to me for analysis."""

BOT_COMMANDS = [
    ("start", "Start the bot"),
    ("help", "Get help information"),
    ("check", "Check a URL, token address, or message for scams"),
    ("report", "Report a scam to our database"),
    ("history", "View your analysis history"),
]


def command_argument(text: str | None) -> str:
    """Everything after the command word: "/check@Bot foo bar" -> "foo bar"."""
    parts = (text or "").split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""


async def handle_start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    await update.effective_message.reply_text(WELCOME_TEXT)


async def handle_help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    await update.effective_message.reply_text(HELP_TEXT)


async def handle_check_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /check <content>.

    1. Show a temporary "checking" notice
    2. Classify content, record it in the session
    3. Submit the workflow and start the follow-up watcher
    4. Remove the notice
    """
    chat_id = update.effective_chat.id
    content = command_argument(update.effective_message.text)

    if not content:
        await update.effective_message.reply_text(CHECK_USAGE)
        return

    checking_msg = await update.effective_message.reply_text("🔍 Checking for potential threats...")

    try:
        store = get_session_store()
        request = workflow.create_analysis_request(content, chat_id)
        store.record_analysis(chat_id, request)
        store.set_active_chat(chat_id)

        logger.info(f"Check {request.id} from chat_id={chat_id}: category={request.category.value}")
        await update.effective_message.reply_text(ANALYZING_TEXT[request.category].format(id=request.id))

        handle = await workflow.start_analysis(request)
        workflow.schedule_watch(handle)
    except Exception as e:
        logger.error(f"Error checking content: {e}", exc_info=True)
        await update.effective_message.reply_text(f"❌ Error checking content: {e}")
    finally:
        try:
            await checking_msg.delete()
        except TelegramError as e:
            logger.warning(f"Failed to delete message: {e}")


async def handle_report_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /report <content>. Acknowledge and log; nothing is stored."""
    content = command_argument(update.effective_message.text)

    if not content:
        await update.effective_message.reply_text(REPORT_USAGE)
        return

    user = update.effective_user
    reporter = (user.username or user.id) if user else "unknown"
    logger.info(f"SCAM REPORT from {reporter}: {content}")

    await update.effective_message.reply_text(
        "Thank you for reporting this potential scam. "
        "Your report has been recorded and will help protect the community."
    )


def format_history(entries) -> str:
    message = "*Your Recent Security Analyses*\n\n"

    for index, entry in enumerate(entries, start=1):
        preview = entry.content[:HISTORY_CONTENT_PREVIEW]
        if len(entry.content) > HISTORY_CONTENT_PREVIEW:
            preview += "..."
        message += f"*{index}. {entry.category.value.upper()} Analysis ({entry.id})*\n"
        message += f"Content: `{preview}`\n"
        message += f"Date: {entry.timestamp.strftime('%Y-%m-%d %H:%M:%S')} UTC\n\n"

    message += "_Use /check to perform a new analysis_"
    return message


async def handle_history_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /history command."""
    chat_id = update.effective_chat.id
    entries = get_session_store().get_recent(chat_id, HISTORY_SIZE)

    if not entries:
        await update.effective_message.reply_text(
            "You haven't performed any security analyses yet. "
            "Use /check to analyze URLs, tokens, or messages."
        )
        return

    message = format_history(entries)
    try:
        await update.effective_message.reply_text(message, parse_mode=ParseMode.MARKDOWN)
    except TelegramError as e:
        logger.warning(f"Error sending formatted history: {e}")
        # Fallback to plain text
        await update.effective_message.reply_text(re.sub(r'[*_`]', '', message))


async def handle_forwarded_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle a forwarded text/caption message.

    Quick pattern scan first for immediate feedback, then the full
    message analysis workflow with a "Forwarded message" context note.
    """
    message = update.effective_message
    content = (message.text or message.caption or "").strip()
    if not content:
        return

    chat_id = update.effective_chat.id
    logger.info(f"Forwarded message from chat_id={chat_id}, text_len={len(content)}")

    try:
        scan = scan_for_scam_patterns(content)
        if scan.matched:
            await message.reply_text(
                "⚠️ Warning: This forwarded message contains potential scam patterns!\n\n"
                + "\n".join(scan.descriptions)
                + "\n\nPerforming detailed analysis..."
            )

        store = get_session_store()
        request = workflow.create_analysis_request(
            content, chat_id, context_note=FORWARDED_NOTE, category=ContentCategory.MESSAGE
        )
        store.record_analysis(chat_id, request)
        store.set_active_chat(chat_id)

        handle = await workflow.start_analysis(request)
        workflow.schedule_watch(handle)
    except Exception as e:
        logger.error(f"Error analyzing forwarded message: {e}", exc_info=True)
        await message.reply_text(f"❌ Error analyzing message: {e}")


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log errors raised inside handlers or by the transport."""
    logger.error(f"Telegram bot error: {context.error}", exc_info=context.error)
