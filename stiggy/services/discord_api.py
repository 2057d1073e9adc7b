"""Async client for the Discord REST API.

Used for command registration and for completing deferred interaction
replies. Authenticates with the bot token of the active mode (see
Settings.bot_token).
"""

import time
from typing import Any

import httpx

from stiggy.core.config import Settings, get_settings
from stiggy.core.logging import log_error, log_external_call, logger

# Discord's maximum page size for GET /users/@me/guilds
GUILDS_PAGE_SIZE = 200


class DiscordClient:
    """Async client for the Discord REST API."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.base_url = settings.discord_api_base_url
        self.application_id = settings.discord_application_id
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bot {settings.bot_token}"},
            timeout=15.0,
            transport=transport,
        )

    async def _guild_page(self, after: str | None) -> list[dict]:
        params: dict[str, Any] = {"limit": GUILDS_PAGE_SIZE}
        if after:
            params["after"] = after

        start = time.time()
        resp = await self.client.get("/users/@me/guilds", params=params)
        log_external_call(
            "discord",
            "get_guilds",
            resp.is_success,
            (time.time() - start) * 1000,
            after=after,
        )
        resp.raise_for_status()
        return resp.json()

    async def get_guilds(self) -> list[dict]:
        """Every guild the bot is a member of, following ``after`` cursors."""
        guilds: list[dict] = []
        after: str | None = None
        while True:
            page = await self._guild_page(after)
            guilds.extend(page)
            if len(page) < GUILDS_PAGE_SIZE:
                return guilds
            after = page[-1]["id"]

    async def register_guild_commands(
        self, guild_id: str, commands: list[dict[str, Any]]
    ) -> list[dict]:
        """Overwrite the guild's command set (guild commands update instantly)."""
        start = time.time()
        resp = await self.client.put(
            f"/applications/{self.application_id}/guilds/{guild_id}/commands",
            json=commands,
        )
        log_external_call(
            "discord",
            "register_guild_commands",
            resp.is_success,
            (time.time() - start) * 1000,
            guild=guild_id,
        )
        resp.raise_for_status()
        return resp.json()

    async def edit_original_response(
        self, interaction_token: str, data: dict[str, Any]
    ) -> dict:
        """Replace the "thinking…" placeholder left by a deferred reply."""
        start = time.time()
        resp = await self.client.patch(
            f"/webhooks/{self.application_id}/{interaction_token}/messages/@original",
            json=data,
        )
        log_external_call(
            "discord",
            "edit_original_response",
            resp.is_success,
            (time.time() - start) * 1000,
        )
        resp.raise_for_status()
        return resp.json()

    async def sync_commands(self, commands: list[dict[str, Any]]) -> int:
        """Register the commands in every guild.

        A failing guild is logged and skipped. Returns the number of guilds
        that accepted the commands.
        """
        if not commands:
            logger.info("No commands found to register")
            return 0

        guilds = await self.get_guilds()
        logger.info("Registering %d command(s) to %d guild(s)...", len(commands), len(guilds))

        registered = 0
        for guild in guilds:
            name = guild.get("name", guild["id"])
            try:
                await self.register_guild_commands(guild["id"], commands)
                logger.info("Registered commands -> %s", name)
                registered += 1
            except httpx.HTTPError as e:
                log_error("Failed to register commands", e, guild=name)
        return registered

    async def close(self) -> None:
        await self.client.aclose()
