"""Slash command definitions, handlers and dispatch.

Each Command carries the JSON schema registered with Discord and the async
handler that turns an Interaction into an interaction response. Numeric
bounds are declared on the options (Discord enforces them client-side) and
checked again here before any calculator runs.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx
from pydantic import ValidationError

from stiggy.bot.embeds import (
    BLURPLE,
    GREEN,
    aero_embed,
    error_embed,
    suspension_embed,
    transmission_embed,
    tune_embed,
)
from stiggy.bot.interactions import (
    Interaction,
    InteractionOption,
    autocomplete_response,
    message_response,
)
from stiggy.core.enums import Drivetrain, OptionType, SuspensionStrategy, TireCompound
from stiggy.core.logging import log_command, log_error, logger
from stiggy.models.tune import (
    CalculationError,
    DownforceInput,
    TuneCreate,
    VehicleSpec,
)
from stiggy.services.aero import compute_aero_tune
from stiggy.services.db import StorageNotConfiguredError
from stiggy.services.discord_api import DiscordClient
from stiggy.services.grip import TIRE_NAMES
from stiggy.services.suspension import compute_suspension_tune
from stiggy.services.transmission import (
    TRACK_NAMES,
    TRANSMISSION_TUNES,
    format_track_name,
    lookup_transmission_tune,
    normalize_track_name,
    suggest_tracks,
)
from stiggy.services.tunes_db import (
    TuneConflictError,
    TuneNotFoundError,
    TuneRepository,
    get_tune_repository,
)
from stiggy.utils.converters import parse_settings_text

RepositoryFactory = Callable[[], TuneRepository]
Handler = Callable[[Interaction, RepositoryFactory], Awaitable[dict[str, Any]]]
Autocompleter = Callable[[InteractionOption], list[tuple[str, str]]]
DiscordFactory = Callable[[], DiscordClient]

GENERIC_ERROR = "There was an error executing that command!"
STORAGE_UNAVAILABLE = "Saved tunes are unavailable right now. Calculators still work!"
MAX_DOWNFORCE_PER_AXLE = 1000
MAX_COMBINED_DOWNFORCE = 2000
MAX_LISTED_TUNES = 10


@dataclass(frozen=True)
class Command:
    name: str
    description: str
    handler: Handler
    options: tuple[dict[str, Any], ...] = ()
    autocomplete: Autocompleter | None = field(default=None)
    # Database-backed commands acknowledge first and edit the reply in later;
    # visibility of a deferred reply is fixed when it is acknowledged
    defer: bool = False
    ephemeral: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Application command JSON for registration."""
        return {
            "name": self.name,
            "description": self.description,
            "type": 1,
            "options": list(self.options),
        }


# -----------------------------------------------------------------------------
# Option builders
# -----------------------------------------------------------------------------


def _number_option(
    name: str,
    description: str,
    min_value: float,
    max_value: float,
    integer: bool = False,
) -> dict[str, Any]:
    return {
        "type": (OptionType.INTEGER if integer else OptionType.NUMBER).value,
        "name": name,
        "description": description,
        "required": True,
        "min_value": min_value,
        "max_value": max_value,
    }


def _string_option(
    name: str,
    description: str,
    required: bool = True,
    choices: list[tuple[str, str]] | None = None,
    autocomplete: bool = False,
    max_length: int | None = None,
) -> dict[str, Any]:
    option: dict[str, Any] = {
        "type": OptionType.STRING.value,
        "name": name,
        "description": description,
        "required": required,
    }
    if choices:
        option["choices"] = [{"name": label, "value": value} for label, value in choices]
    if autocomplete:
        option["autocomplete"] = True
    if max_length:
        option["max_length"] = max_length
    return option


_TIRE_CHOICES = [(f"{code} ({label})", code) for code, label in TIRE_NAMES.items()]
_DRIVETRAIN_CHOICES = [
    ("FF (Front-Wheel Drive)", Drivetrain.FF.value),
    ("FR (Front-Engine Rear-Drive)", Drivetrain.FR.value),
    ("MR (Mid-Engine Rear-Drive)", Drivetrain.MR.value),
    ("RR (Rear-Engine Rear-Drive)", Drivetrain.RR.value),
]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _invalid(message: str) -> dict[str, Any]:
    return message_response(embeds=[error_embed(message)])


def _range_error(label: str, value: float, low: float, high: float) -> str | None:
    if low <= value <= high:
        return None
    return f"{label} must be between {low} and {high}."


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}"


def _tire_code(raw: str) -> str:
    # Unknown codes are passed through; the calculators fall back to neutral grip
    compound = TireCompound.from_string(raw)
    return compound.value if compound else raw.strip().upper()


# -----------------------------------------------------------------------------
# Calculator commands
# -----------------------------------------------------------------------------


async def handle_tune_downforce(
    interaction: Interaction, tunes: RepositoryFactory
) -> dict[str, Any]:
    weight = interaction.require("weight")
    front = interaction.require("front")
    tire = interaction.require("tire")

    problem = _range_error("Weight", weight, 1000, 5000)
    if problem:
        return _invalid(problem)

    result = compute_aero_tune(weight, front, tire)
    if isinstance(result, CalculationError):
        return _invalid(result.message)
    return message_response(embeds=[aero_embed(weight, front, result)])


async def _suspension_reply(
    interaction: Interaction,
    strategy: SuspensionStrategy,
    balance_range: tuple[int, int],
    downforce: DownforceInput,
    downforce_label: str,
) -> dict[str, Any]:
    drivetrain = interaction.require("drivetrain")
    weight = interaction.require("weight")
    balance = interaction.require("balance")
    tire = _tire_code(interaction.require("tire"))

    problem = _range_error("Front weight balance %", balance, *balance_range)
    if problem:
        return _invalid(problem)

    try:
        spec = VehicleSpec(
            weight_lbs=weight,
            front_weight_percent=balance,
            tire=tire,
            drivetrain=drivetrain,
            downforce=downforce,
        )
    except ValidationError as e:
        return _invalid(_validation_message(e))

    tune = compute_suspension_tune(
        spec.drivetrain,
        spec.weight_lbs,
        spec.front_weight_percent,
        spec.tire,
        spec.downforce,
        strategy=strategy,
    )
    title = (
        f"Suspension Tune: {drivetrain} | {weight} lbs | "
        f"{balance}/{100 - balance} | {tire} | {downforce_label}"
    )
    return message_response(embeds=[suspension_embed(title, tune)])


async def handle_tune_suspension(
    interaction: Interaction, tunes: RepositoryFactory
) -> dict[str, Any]:
    front_df = interaction.require("front-downforce")
    rear_df = interaction.require("rear-downforce")
    for label, value in (("Front downforce", front_df), ("Rear downforce", rear_df)):
        problem = _range_error(label, value, 0, MAX_DOWNFORCE_PER_AXLE)
        if problem:
            return _invalid(problem)

    return await _suspension_reply(
        interaction,
        SuspensionStrategy.COMPETITIVE,
        (40, 60),
        DownforceInput(front=front_df, rear=rear_df),
        f"DF {front_df}/{rear_df}",
    )


async def handle_tune_suspension_grip(
    interaction: Interaction, tunes: RepositoryFactory
) -> dict[str, Any]:
    downforce = interaction.require("downforce")
    problem = _range_error("Downforce", downforce, 0, MAX_COMBINED_DOWNFORCE)
    if problem:
        return _invalid(problem)

    return await _suspension_reply(
        interaction,
        SuspensionStrategy.GRIP,
        (30, 70),
        DownforceInput(combined=downforce),
        f"DF {downforce}",
    )


async def handle_tune_transmission(
    interaction: Interaction, tunes: RepositoryFactory
) -> dict[str, Any]:
    raw_track = interaction.require("track")
    result = lookup_transmission_tune(raw_track)

    if isinstance(result, CalculationError):
        listing = "\n".join(f"• {format_track_name(name)}" for name in result.available)
        return message_response(
            content=(
                f"❌ Sorry, I don't have transmission data for \"**{raw_track}**\" yet."
                f"\n\nAvailable tracks:\n{listing}"
            )
        )
    return message_response(
        embeds=[transmission_embed(normalize_track_name(raw_track), result)]
    )


def track_choices(focused: InteractionOption) -> list[tuple[str, str]]:
    if focused.name != "track":
        return []
    return suggest_tracks(str(focused.value or ""))


# -----------------------------------------------------------------------------
# Saved tune commands
# -----------------------------------------------------------------------------


async def handle_tune_save(
    interaction: Interaction, tunes: RepositoryFactory
) -> dict[str, Any]:
    author = interaction.author
    if author is None:
        return message_response("Could not identify who sent this command.", ephemeral=True)

    track = interaction.option("track")
    if track:
        normalized = normalize_track_name(track)
        track = normalized if normalized in TRANSMISSION_TUNES else track.strip()

    try:
        tune = TuneCreate(
            car=interaction.require("car"),
            track=track or None,
            pp=interaction.require("pp"),
            power=interaction.require("power"),
            weight=interaction.require("weight"),
            author_id=author.id,
            author_name=interaction.author_name,
            settings=parse_settings_text(interaction.option("settings")),
        )
    except ValidationError as e:
        return _invalid(_validation_message(e))

    tune_id = await asyncio.to_thread(tunes().save_tune, tune)
    return message_response(
        content=f"✅ Saved **{tune.car}** as tune `{tune_id}`. Share it with `/tune-view id:{tune_id}`."
    )


async def handle_tune_view(
    interaction: Interaction, tunes: RepositoryFactory
) -> dict[str, Any]:
    tune_id = str(interaction.require("id")).strip()
    tune = await asyncio.to_thread(tunes().get_tune, tune_id)
    if tune is None:
        return message_response(f"❌ No tune found with id `{tune_id}`.", ephemeral=True)
    return message_response(embeds=[tune_embed(tune)])


async def handle_tune_mine(
    interaction: Interaction, tunes: RepositoryFactory
) -> dict[str, Any]:
    author = interaction.author
    if author is None:
        return message_response("Could not identify who sent this command.", ephemeral=True)

    saved = await asyncio.to_thread(tunes().get_user_tunes, author.id)
    if not saved:
        return message_response(
            "You haven't saved any tunes yet. Use `/tune-save` to add one.", ephemeral=True
        )

    lines = [
        f"`{t.id}` **{t.car}** | {format_track_name(t.track) if t.track else 'Any track'} | ❤️ {t.like_count}"
        for t in saved[:MAX_LISTED_TUNES]
    ]
    if len(saved) > MAX_LISTED_TUNES:
        lines.append(f"…and {len(saved) - MAX_LISTED_TUNES} more")
    return message_response(
        embeds=[
            {
                "title": f"{interaction.author_name}'s Tunes",
                "description": "\n".join(lines),
                "color": GREEN,
            }
        ],
        ephemeral=True,
    )


async def handle_tune_like(
    interaction: Interaction, tunes: RepositoryFactory
) -> dict[str, Any]:
    author = interaction.author
    if author is None:
        return message_response("Could not identify who sent this command.", ephemeral=True)

    tune_id = str(interaction.require("id")).strip()
    repo = tunes()
    try:
        liked = await asyncio.to_thread(repo.toggle_like, tune_id, author.id)
    except TuneNotFoundError:
        return message_response(f"❌ No tune found with id `{tune_id}`.", ephemeral=True)
    except TuneConflictError:
        logger.warning("Giving up on like toggle for tune %s", tune_id)
        return message_response(
            "That tune is busy right now, try again in a moment.", ephemeral=True
        )

    tune = await asyncio.to_thread(repo.get_tune, tune_id)
    count = tune.like_count if tune else 0
    verb = "❤️ Liked" if liked else "💔 Unliked"
    return message_response(f"{verb} tune `{tune_id}` ({count} like{'s' if count != 1 else ''}).")


# -----------------------------------------------------------------------------
# Help
# -----------------------------------------------------------------------------


async def handle_help(interaction: Interaction, tunes: RepositoryFactory) -> dict[str, Any]:
    lines = [f"`/{cmd.name}` {cmd.description}" for cmd in COMMANDS.values()]
    return message_response(
        embeds=[
            {
                "title": "Stiggy Commands",
                "description": "\n".join(lines),
                "color": BLURPLE,
                "footer": {"text": f"{len(TRACK_NAMES)} tracks with transmission data"},
            }
        ],
        ephemeral=True,
    )


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

_WEIGHT = _number_option("weight", "Car weight in pounds (lbs)", 1000, 5000)
_WEIGHT_INT = _number_option("weight", "Car weight in lbs", 1000, 5000, integer=True)
_TIRE = _string_option("tire", "Tire compound", choices=_TIRE_CHOICES)
_DRIVETRAIN = _string_option("drivetrain", "Drivetrain type", choices=_DRIVETRAIN_CHOICES)
_TRACK = _string_option("track", "The name of the track", autocomplete=True)
_TUNE_ID = _string_option("id", "Tune id", max_length=64)

COMMANDS: dict[str, Command] = {
    cmd.name: cmd
    for cmd in (
        Command(
            name="tune-downforce",
            description="GT7 grip-optimized downforce & natural frequency",
            handler=handle_tune_downforce,
            options=(
                _WEIGHT,
                _number_option("front", "Front weight distribution % (e.g. 54)", 30, 70),
                _TIRE,
            ),
        ),
        Command(
            name="tune-suspension",
            description="Calculate competitive suspension tune for GT7 (stability + lap times).",
            handler=handle_tune_suspension,
            options=(
                _DRIVETRAIN,
                _WEIGHT_INT,
                _number_option(
                    "balance", "Front weight balance % (e.g., 55 for 55/45)", 40, 60, integer=True
                ),
                _TIRE,
                _number_option(
                    "front-downforce", "Front downforce in lbs", 0, MAX_DOWNFORCE_PER_AXLE, integer=True
                ),
                _number_option(
                    "rear-downforce", "Rear downforce in lbs", 0, MAX_DOWNFORCE_PER_AXLE, integer=True
                ),
            ),
        ),
        Command(
            name="tune-suspension-grip",
            description="Calculate grip-focused suspension tune for GT7 (sturdy + nimble).",
            handler=handle_tune_suspension_grip,
            options=(
                _DRIVETRAIN,
                _WEIGHT_INT,
                _number_option(
                    "balance", "Front weight balance % (e.g., 55 for 55/45)", 30, 70, integer=True
                ),
                _TIRE,
                _number_option(
                    "downforce", "Total downforce in lbs", 0, MAX_COMBINED_DOWNFORCE, integer=True
                ),
            ),
        ),
        Command(
            name="tune-transmission",
            description="Get optimal transmission ratios for a specific track",
            handler=handle_tune_transmission,
            options=(_TRACK,),
            autocomplete=track_choices,
        ),
        Command(
            name="tune-save",
            description="Save a tune so others can find and like it",
            handler=handle_tune_save,
            defer=True,
            options=(
                _string_option("car", "Car name", max_length=200),
                _number_option("pp", "Performance points", 0, 1000, integer=True),
                _number_option("power", "Power in hp", 0, 3000, integer=True),
                _number_option("weight", "Car weight in lbs", 0, 10000, integer=True),
                _string_option("track", "Track the tune is for", required=False, autocomplete=True),
                _string_option(
                    "settings",
                    "Settings as key=value pairs, e.g. front_nf=2.8; arb_front=6",
                    required=False,
                    max_length=1000,
                ),
            ),
            autocomplete=track_choices,
        ),
        Command(
            name="tune-view",
            description="Show a saved tune",
            handler=handle_tune_view,
            defer=True,
            options=(_TUNE_ID,),
        ),
        Command(
            name="tune-mine",
            description="List the tunes you have saved",
            handler=handle_tune_mine,
            defer=True,
            ephemeral=True,
        ),
        Command(
            name="tune-like",
            description="Like a saved tune (run again to unlike)",
            handler=handle_tune_like,
            defer=True,
            options=(_TUNE_ID,),
        ),
        Command(
            name="help",
            description="List Stiggy's commands",
            handler=handle_help,
        ),
    )
}


def command_payloads() -> list[dict[str, Any]]:
    return [cmd.to_payload() for cmd in COMMANDS.values()]


async def dispatch_command(
    interaction: Interaction,
    tunes: RepositoryFactory = get_tune_repository,
) -> dict[str, Any]:
    """Run the handler for an APPLICATION_COMMAND interaction."""
    name = interaction.command_name
    command = COMMANDS.get(name)
    if command is None:
        log_error(f"Command {name} not found")
        return message_response(GENERIC_ERROR, ephemeral=True)

    author = interaction.author
    log_command(name, author.id if author else None, interaction.guild_id)
    try:
        return await command.handler(interaction, tunes)
    except StorageNotConfiguredError as e:
        log_error("Tune storage unavailable", e, command=name)
        return message_response(STORAGE_UNAVAILABLE, ephemeral=True)
    except Exception as e:
        log_error("Command execution error", e, command=name)
        return message_response(GENERIC_ERROR, ephemeral=True)


def dispatch_autocomplete(interaction: Interaction) -> dict[str, Any]:
    """Build choices for an APPLICATION_COMMAND_AUTOCOMPLETE interaction."""
    command = COMMANDS.get(interaction.command_name)
    focused = interaction.focused_option()
    if command is None or command.autocomplete is None or focused is None:
        return autocomplete_response([])
    return autocomplete_response(command.autocomplete(focused))


async def complete_deferred(
    interaction: Interaction,
    tunes: RepositoryFactory,
    discord: DiscordFactory,
) -> None:
    """Run a deferred command and edit its reply over the placeholder.

    Runs after the deferred acknowledgement has been returned to Discord, so
    failures can only be logged.
    """
    response = await dispatch_command(interaction, tunes)
    # Message flags cannot change once the interaction is acknowledged
    data = {key: value for key, value in response["data"].items() if key != "flags"}

    client = discord()
    try:
        await client.edit_original_response(interaction.token, data)
    except httpx.HTTPError as e:
        log_error("Failed to deliver deferred reply", e, command=interaction.command_name)
    finally:
        await client.close()
