"""Enums for tuning-related constants."""

from enum import Enum, IntEnum


class TireCompound(str, Enum):
    """GT7 tire compounds."""

    COMFORT_HARD = "CH"
    COMFORT_MEDIUM = "CM"
    COMFORT_SOFT = "CS"
    SPORTS_HARD = "SH"
    SPORTS_MEDIUM = "SM"
    SPORTS_SOFT = "SS"
    RACING_HARD = "RH"
    RACING_MEDIUM = "RM"
    RACING_SOFT = "RS"

    @classmethod
    def from_string(cls, value: str | None) -> "TireCompound | None":
        """Convert a compound code in any case to enum, returning None if invalid."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class Drivetrain(str, Enum):
    """Drivetrain layouts."""

    FF = "FF"
    FR = "FR"
    MR = "MR"
    RR = "RR"

    @property
    def is_rear_driven(self) -> bool:
        return self in (Drivetrain.FR, Drivetrain.MR, Drivetrain.RR)


class SuspensionStrategy(str, Enum):
    """Suspension tuning philosophies."""

    # Stability + lap times, split front/rear downforce
    COMPETITIVE = "competitive"
    # Grip / G-force oriented, combined downforce
    GRIP = "grip"


class ErrorKind(str, Enum):
    """Calculation error categories."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"


class InteractionType(IntEnum):
    """Discord interaction request types."""

    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class InteractionResponseType(IntEnum):
    """Discord interaction callback types."""

    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    APPLICATION_COMMAND_AUTOCOMPLETE_RESULT = 8


class OptionType(IntEnum):
    """Discord application command option types."""

    STRING = 3
    INTEGER = 4
    NUMBER = 10


# Discord message flag for replies only the caller can see
EPHEMERAL_FLAG = 64

# Discord caps autocomplete responses at 25 choices
MAX_AUTOCOMPLETE_CHOICES = 25
