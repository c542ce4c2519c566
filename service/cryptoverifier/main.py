import asyncio
from fastapi import FastAPI, Request, Header, HTTPException

from cryptoverifier.config import get_settings
from cryptoverifier.logging_config import get_logger, setup_logging
from cryptoverifier.api.tools import router as tools_router
from cryptoverifier.api.workflows import router as workflows_router
from cryptoverifier.services.openserv_client import close_openserv_client
from cryptoverifier.telegram_bot.bot import handle_telegram_update, initialize_bot, shutdown_bot

logger = get_logger("main")

app = FastAPI(
    title="CryptoVerifier",
    description="Telegram bot that checks URLs, token addresses and messages for crypto scams",
    version="0.1.0"
)

# Keep references to webhook tasks until they finish
_update_tasks: set[asyncio.Task] = set()


# Lifecycle events
@app.on_event("startup")
async def startup_event():
    """Validate configuration and initialize bot on startup."""
    # Missing required settings raise here and abort startup
    settings = get_settings()
    setup_logging(settings.log_level)

    agents = settings.agents
    logger.info("Using the following agent IDs:")
    for name, agent_id in agents.model_dump().items():
        logger.info(f"  {name}: {agent_id}")
    logger.info(f"Workspace ID: {settings.workspace_id}")

    logger.info("Initializing Telegram bot...")
    await initialize_bot()
    logger.info("Bot ready")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown bot and HTTP clients on application shutdown."""
    logger.info("Shutting down Telegram bot...")
    await shutdown_bot()
    await close_openserv_client()
    logger.info("Bot stopped")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "ok",
        "environment": settings.environment,
        "version": "0.1.0"
    }


# Telegram webhook endpoint
@app.post("/telegram/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: str = Header(None)
):
    """
    Webhook endpoint for Telegram updates.

    Telegram sends updates here when messages arrive.
    """
    settings = get_settings()

    # Verify secret token if configured
    if settings.telegram_webhook_secret:
        if x_telegram_bot_api_secret_token != settings.telegram_webhook_secret:
            raise HTTPException(status_code=403, detail="Invalid secret token")

    update_data = await request.json()

    # Handle update in background (fire-and-forget for fast 200 OK)
    task = asyncio.create_task(handle_telegram_update(update_data))
    _update_tasks.add(task)
    task.add_done_callback(_update_tasks.discard)

    return {"ok": True}


# Include routers
app.include_router(tools_router)
app.include_router(workflows_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
