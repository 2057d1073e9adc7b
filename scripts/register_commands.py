#!/usr/bin/env python
"""Register Stiggy's slash commands in every guild the bot is in.

Usage:
    python scripts/register_commands.py [--dev]
"""

import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from stiggy.bot.commands import command_payloads
from stiggy.core.config import get_settings
from stiggy.services.discord_api import DiscordClient


async def main() -> int:
    settings = get_settings()
    if not settings.bot_token or not settings.discord_application_id:
        print(f"Error: {settings.token_env_name} and DISCORD_APPLICATION_ID are required")
        return 1

    client = DiscordClient(settings)
    try:
        count = await client.sync_commands(command_payloads())
    finally:
        await client.close()

    print(f"Registered {len(command_payloads())} command(s) in {count} guild(s)")
    return 0


if __name__ == "__main__":
    if "--dev" in sys.argv:
        os.environ["DEV_MODE"] = "true"
    sys.exit(asyncio.run(main()))
