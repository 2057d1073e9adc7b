"""FastAPI route definitions for the Stiggy interactions endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from pydantic import ValidationError

from stiggy.bot.commands import (
    COMMANDS,
    DiscordFactory,
    RepositoryFactory,
    complete_deferred,
    dispatch_autocomplete,
    dispatch_command,
)
from stiggy.bot.interactions import Interaction, deferred_response, pong_response
from stiggy.bot.security import verify_signature
from stiggy.core.config import Settings, get_settings
from stiggy.core.enums import InteractionType
from stiggy.core.logging import logger
from stiggy.services.discord_api import DiscordClient
from stiggy.services.tunes_db import get_tune_repository

router = APIRouter()

HEALTH_MESSAGE = "Stiggy is alive and tuning cars 24/7! 🚗💨"


def get_repository_factory() -> RepositoryFactory:
    """Dependency for lazily creating the tune repository."""
    return get_tune_repository


def get_discord_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> DiscordFactory:
    """Dependency for creating REST clients that complete deferred replies."""
    return lambda: DiscordClient(settings)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/")
@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "service": "stiggy", "message": HEALTH_MESSAGE}


# ---------------------------------------------------------------------------
# Discord interactions
# ---------------------------------------------------------------------------


@router.post("/interactions")
async def interactions(
    request: Request,
    background: BackgroundTasks,
    settings: Annotated[Settings, Depends(get_settings)],
    tunes: Annotated[RepositoryFactory, Depends(get_repository_factory)],
    discord: Annotated[DiscordFactory, Depends(get_discord_factory)],
) -> dict[str, Any]:
    """Discord HTTP interactions endpoint.

    Discord signs every request; unsigned or tampered bodies get a 401,
    which Discord also checks for when the endpoint URL is configured.
    """
    body = await request.body()
    if not verify_signature(
        settings.discord_public_key,
        request.headers.get("X-Signature-Ed25519"),
        request.headers.get("X-Signature-Timestamp"),
        body,
    ):
        raise HTTPException(status_code=401, detail="Invalid request signature")

    try:
        interaction = Interaction.model_validate_json(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Malformed interaction: {e.errors()[0]['msg']}")

    if interaction.type == InteractionType.PING:
        return pong_response()
    if interaction.type == InteractionType.APPLICATION_COMMAND:
        command = COMMANDS.get(interaction.command_name)
        if command is not None and command.defer:
            # Supabase round trips can outlast the 3 second reply window
            background.add_task(complete_deferred, interaction, tunes, discord)
            return deferred_response(command.ephemeral)
        return await dispatch_command(interaction, tunes)
    if interaction.type == InteractionType.APPLICATION_COMMAND_AUTOCOMPLETE:
        return dispatch_autocomplete(interaction)

    logger.warning("Unsupported interaction type %s", interaction.type)
    raise HTTPException(status_code=400, detail="Unsupported interaction type")
