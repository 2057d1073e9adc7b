"""Discord REST client, configuration and logging tests.

HTTP calls go through httpx.MockTransport; nothing leaves the process.

Usage:
    pytest tests/test_discord_api.py -v
"""

import asyncio
import json

import httpx
import pytest

from conftest import make_interaction
from stiggy.bot.commands import command_payloads, complete_deferred
from stiggy.core.config import _ENV_FILE, Settings, validate_settings
from stiggy.core.logging import format_context, log_command
from stiggy.services.db import StorageNotConfiguredError, _create_client
from stiggy.services.discord_api import GUILDS_PAGE_SIZE, DiscordClient


def _settings(**overrides) -> Settings:
    values = {
        "DISCORD_TOKEN": "prod-token",
        "DISCORD_TOKEN_DEV": "dev-token",
        "DISCORD_APPLICATION_ID": "app-1",
        "DISCORD_PUBLIC_KEY": "00" * 32,
        "SUPABASE_URL": "https://example.supabase.co",
        "SUPABASE_KEY": "key",
    }
    values.update(overrides)
    return Settings(**values)


# =============================================================================
# Configuration
# =============================================================================

class TestSettings:

    def test_complete_settings_validate(self):
        validate_settings(_settings())

    def test_missing_values_are_listed(self):
        with pytest.raises(ValueError) as exc:
            validate_settings(_settings(DISCORD_APPLICATION_ID="", SUPABASE_KEY=""))
        message = str(exc.value)
        assert "DISCORD_APPLICATION_ID is required" in message
        assert "SUPABASE_KEY is required" in message

    def test_dev_mode_uses_dev_token(self):
        settings = _settings(DEV_MODE=True)
        assert settings.bot_token == "dev-token"
        assert settings.token_env_name == "DISCORD_TOKEN_DEV"

    def test_port_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        assert Settings().port == 9000
        monkeypatch.delenv("PORT")
        assert Settings().port == 8080

    def test_env_file_resolves_to_project_root(self):
        assert _ENV_FILE.name == ".env"
        assert (_ENV_FILE.parent / "pyproject.toml").is_file()

    def test_storage_needs_credentials(self):
        with pytest.raises(StorageNotConfiguredError, match="SUPABASE_URL"):
            _create_client(_settings(SUPABASE_URL=""))

    def test_dev_mode_requires_dev_token(self):
        with pytest.raises(ValueError, match="DISCORD_TOKEN_DEV is required for dev mode"):
            validate_settings(_settings(DEV_MODE=True, DISCORD_TOKEN_DEV=""))


# =============================================================================
# Command registration
# =============================================================================

class TestSyncCommands:

    def _client(self, handler):
        return DiscordClient(_settings(), transport=httpx.MockTransport(handler))

    def test_registers_in_every_guild(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            assert request.headers["Authorization"] == "Bot prod-token"
            if request.method == "GET":
                return httpx.Response(200, json=[{"id": "g1", "name": "One"}, {"id": "g2"}])
            assert len(json.loads(request.content)) == len(command_payloads())
            return httpx.Response(200, json=[])

        async def scenario():
            discord = self._client(handler)
            try:
                return await discord.sync_commands(command_payloads())
            finally:
                await discord.close()

        assert asyncio.run(scenario()) == 2
        assert calls == [
            ("GET", "/api/v10/users/@me/guilds"),
            ("PUT", "/api/v10/applications/app-1/guilds/g1/commands"),
            ("PUT", "/api/v10/applications/app-1/guilds/g2/commands"),
        ]

    def test_failing_guild_is_skipped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json=[{"id": "g1"}, {"id": "g2"}])
            if "/guilds/g1/" in request.url.path:
                return httpx.Response(403, json={"message": "Missing Access"})
            return httpx.Response(200, json=[])

        async def scenario():
            discord = self._client(handler)
            try:
                return await discord.sync_commands(command_payloads())
            finally:
                await discord.close()

        assert asyncio.run(scenario()) == 1

    def test_no_commands_makes_no_requests(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("unexpected request")

        async def scenario():
            discord = self._client(handler)
            try:
                return await discord.sync_commands([])
            finally:
                await discord.close()

        assert asyncio.run(scenario()) == 0

    def test_follows_guild_pages(self):
        cursors = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                after = request.url.params.get("after")
                cursors.append(after)
                assert request.url.params["limit"] == str(GUILDS_PAGE_SIZE)
                if after is None:
                    return httpx.Response(
                        200, json=[{"id": str(i)} for i in range(GUILDS_PAGE_SIZE)]
                    )
                return httpx.Response(200, json=[{"id": "200"}])
            return httpx.Response(200, json=[])

        async def scenario():
            discord = self._client(handler)
            try:
                return await discord.sync_commands(command_payloads())
            finally:
                await discord.close()

        assert asyncio.run(scenario()) == GUILDS_PAGE_SIZE + 1
        assert cursors == [None, str(GUILDS_PAGE_SIZE - 1)]


class TestDeferredReplies:

    def test_edit_original_response(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"id": "m1"})

        async def scenario():
            discord = DiscordClient(_settings(), transport=httpx.MockTransport(handler))
            try:
                await discord.edit_original_response("tok", {"content": "done"})
            finally:
                await discord.close()

        asyncio.run(scenario())
        assert seen == [
            ("PATCH", "/api/v10/webhooks/app-1/tok/messages/@original", {"content": "done"})
        ]

    def test_failed_edit_is_logged_not_raised(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Unknown Webhook"})

        interaction = make_interaction("help", user_id="user-1")
        factory = lambda: DiscordClient(_settings(), transport=httpx.MockTransport(handler))
        asyncio.run(complete_deferred(interaction, lambda: None, factory))


# =============================================================================
# Logging
# =============================================================================

class TestLogging:

    def test_context_skips_unset_values(self):
        assert format_context(command="help", guild=None, user="u1") == "command=help user=u1"

    def test_command_line_carries_guild(self, caplog):
        with caplog.at_level("INFO", logger="stiggy"):
            log_command("tune-like", "user-1", "guild-9")
            log_command("tune-like", "user-1")
        assert caplog.messages == [
            "COMMAND /tune-like user=user-1 guild=guild-9",
            "COMMAND /tune-like user=user-1",
        ]
