"""Embed rendering for command replies.

Embeds are plain dicts in Discord's JSON shape. Numbers are formatted with
the precision the calculators rounded them to.
"""

from datetime import datetime, timezone
from typing import Any

from stiggy.core.enums import SuspensionStrategy
from stiggy.models.tune import GEAR_NAMES, AeroTune, SuspensionTune, TransmissionTune, Tune
from stiggy.services.transmission import format_track_name

GOLD = 0xFFD700
BLUE = 0x0099FF
BLURPLE = 0x5865F2
GREEN = 0x57F287
RED = 0xFF0000

FOOTER = "Generated by Stiggy | Tune and test on track"
FIELD_VALUE_LIMIT = 1024


def _field(name: str, value: str, inline: bool = True) -> dict[str, Any]:
    return {"name": name, "value": value, "inline": inline}


def _number(value: float) -> str:
    """1234.0 -> '1,234', 1234.5 -> '1,234.5'."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def _front_rear(front: str, rear: str) -> str:
    return f"Front: {front}\nRear: {rear}"


def error_embed(message: str, title: str = "Invalid Input") -> dict[str, Any]:
    return {"title": title, "description": message, "color": RED}


def aero_embed(weight: float, front_percent: float, tune: AeroTune) -> dict[str, Any]:
    front_block = (
        f"```Downforce: {tune.front_downforce:>6.1f}\n"
        f"Nat Freq : {tune.front_frequency:.2f} Hz```"
    )
    rear_block = (
        f"```Downforce: {tune.rear_downforce:>6.1f}\n"
        f"Nat Freq : {tune.rear_frequency:.2f} Hz```"
    )
    return {
        "title": "GT7 Grip-Optimized Tuning",
        "color": GOLD,
        "fields": [
            _field("Weight", f"{_number(weight)} lbs", inline=False),
            _field(
                "Balance",
                f"{_number(front_percent)}% Front │ {_number(100 - front_percent)}% Rear",
                inline=False,
            ),
            _field("Tire", f"{tune.tire_display} (Grip: {tune.grip:.2f}g)", inline=False),
            _field("**FRONT**", front_block),
            _field("**REAR**", rear_block),
        ],
        "footer": {"text": "Pure grip focus • No speed trade-off • Values in lbs"},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _damper(value: int | float) -> str:
    return str(value) if isinstance(value, int) else f"{value:.2f}"


_SUSPENSION_BLURBS = {
    SuspensionStrategy.COMPETITIVE: (
        "Competitive setup: stability + lap times. Test and adjust on track.",
        "Compression (20–50)",
        "Rebound (30–60)",
    ),
    SuspensionStrategy.GRIP: (
        "Grip setup: sturdy platform, nimble turn-in. Test and adjust on track.",
        "Compression",
        "Rebound",
    ),
}


def suspension_embed(title: str, tune: SuspensionTune) -> dict[str, Any]:
    description, comp_label, rebound_label = _SUSPENSION_BLURBS[tune.strategy]
    return {
        "title": title,
        "description": description,
        "color": BLUE,
        "fields": [
            _field(
                "Natural Frequency (Hz)",
                _front_rear(f"{tune.front_frequency:.2f}", f"{tune.rear_frequency:.2f}"),
            ),
            _field("Anti-Roll Bars (1–10)", _front_rear(str(tune.front_arb), str(tune.rear_arb))),
            _field(
                comp_label,
                _front_rear(_damper(tune.front_compression), _damper(tune.rear_compression)),
            ),
            _field(
                rebound_label,
                _front_rear(_damper(tune.front_rebound), _damper(tune.rear_rebound)),
            ),
            _field(
                "Ride Height (mm)",
                _front_rear(str(tune.front_ride_height), str(tune.rear_ride_height)),
            ),
            _field(
                "Camber (degrees)",
                _front_rear(f"-{tune.front_camber:.1f}", f"-{tune.rear_camber:.1f}"),
            ),
            _field(
                "Toe (degrees)",
                _front_rear(f"{tune.front_toe:.2f}", f"{tune.rear_toe:.2f}"),
            ),
        ],
        "footer": {"text": FOOTER},
    }


def transmission_embed(track: str, tune: TransmissionTune) -> dict[str, Any]:
    fields = [_field("Final Drive", f"{tune.final_drive:.3f}")]
    fields.extend(_field(gear, f"{tune.gears[gear]:.3f}") for gear in GEAR_NAMES)
    return {
        "title": f"Transmission Tune: {format_track_name(track)}",
        "description": "Optimal ratios for acceleration and top speed balance.",
        "color": BLURPLE,
        "fields": fields,
        "footer": {"text": "Generated by Stiggy | Test in-game"},
    }


def tune_embed(tune: Tune) -> dict[str, Any]:
    fields = [
        _field("PP", str(tune.pp)),
        _field("Power", f"{tune.power:,} hp"),
        _field("Weight", f"{tune.weight:,} lbs"),
        _field("Track", format_track_name(tune.track) if tune.track else "Any"),
        _field("Likes", f"❤️ {tune.like_count}"),
    ]
    if tune.settings:
        lines = "\n".join(f"{key}: {value}" for key, value in tune.settings.items())
        # Field values are capped by Discord; room is left for the code fence
        room = FIELD_VALUE_LIMIT - 6
        if len(lines) > room:
            lines = lines[: room - 1] + "…"
        fields.append(_field("Settings", f"```{lines}```", inline=False))
    return {
        "title": tune.car,
        "description": f"Tune `{tune.id}` by {tune.author_name}",
        "color": GREEN,
        "fields": fields,
        "footer": {"text": FOOTER},
        "timestamp": tune.updated_at.isoformat(),
    }
