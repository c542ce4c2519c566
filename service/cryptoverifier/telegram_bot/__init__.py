"""
Telegram Bot module for CryptoVerifier.

ARCHITECTURE: Thin gateway layer - NO analysis logic!
- Receives updates (webhook via FastAPI, or long polling)
- Parses commands and forwarded messages
- Hands classified requests to services.workflow
- Sends messages back through telegram_api (reports, errors, follow-ups)

Submodules are imported directly (cryptoverifier.telegram_bot.bot, ...)
because services.workflow and the handlers depend on each other's modules.
"""
