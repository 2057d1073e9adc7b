"""FastAPI app entry point for the Stiggy GT7 tuning bot."""

import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from stiggy.api.routes import router
from stiggy.bot.commands import COMMANDS, command_payloads
from stiggy.core.config import get_settings, validate_settings
from stiggy.core.logging import log_error, log_request, log_response, logger, setup_logging
from stiggy.services.discord_api import DiscordClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: validate config, register commands on startup."""
    settings = get_settings()
    setup_logging(settings.log_level)
    try:
        validate_settings(settings)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    mode = "DEV" if settings.dev_mode else "PRODUCTION"
    logger.info(
        f"🚀 Starting in {mode} mode"
        + (" (using DISCORD_TOKEN_DEV)" if settings.dev_mode else "")
    )
    logger.info(f"Loaded {len(COMMANDS)} command(s): {', '.join(COMMANDS)}")

    if settings.register_commands_on_startup:
        discord = DiscordClient(settings)
        try:
            await discord.sync_commands(command_payloads())
        except httpx.HTTPError as e:
            # The bot still answers with whatever commands Discord already has
            log_error("Command registration failed", e)
        finally:
            await discord.close()

    logger.info("Stiggy is online and ready to tune cars")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="Stiggy",
    description="GT7 tuning calculator bot for Discord",
    version="1.0.0",
    lifespan=lifespan,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    log_request(request.method, request.url.path)

    response = await call_next(request)

    duration_ms = (time.time() - start) * 1000
    log_response(request.method, request.url.path, response.status_code, duration_ms)

    return response


app.include_router(router)
