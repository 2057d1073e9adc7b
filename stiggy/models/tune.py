from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stiggy.core.enums import Drivetrain, ErrorKind, SuspensionStrategy


class FrozenModel(BaseModel):
    """Immutable base for calculator inputs/outputs and reference data."""

    model_config = ConfigDict(frozen=True)


class DownforceInput(FrozenModel):
    """Aero load fed to the suspension calculator.

    Either a front/rear split or a single combined figure. When ``combined``
    is set it wins over the split values.
    """

    front: float = Field(default=0.0, ge=0)
    rear: float = Field(default=0.0, ge=0)
    combined: Optional[float] = Field(default=None, ge=0)

    @property
    def total(self) -> float:
        if self.combined is not None:
            return self.combined
        return self.front + self.rear


class VehicleSpec(FrozenModel):
    """Validated vehicle parameters as supplied by the command layer."""

    weight_lbs: float = Field(..., ge=1000, le=5000)
    # Per-command bands (30-70, 40-60) are checked by the calculators/commands
    front_weight_percent: float = Field(..., gt=0, lt=100)
    tire: str
    drivetrain: Optional[Drivetrain] = None
    downforce: DownforceInput = DownforceInput()


class AeroTune(FrozenModel):
    front_downforce: float  # lbs, 1 dp, [0, 300]
    rear_downforce: float
    front_frequency: float  # Hz, 2 dp, [1.40, 3.30]
    rear_frequency: float
    grip: float  # 2 dp
    tire_display: str


class SuspensionTune(FrozenModel):
    strategy: SuspensionStrategy
    front_ride_height: int  # mm
    rear_ride_height: int
    front_frequency: float  # Hz, 2 dp
    rear_frequency: float
    front_compression: int | float  # int when band-clamped
    rear_compression: int | float
    front_rebound: int | float
    rear_rebound: int | float
    front_arb: int  # 1-10
    rear_arb: int
    front_camber: float  # degrees, 1 dp, shown negative
    rear_camber: float
    front_toe: float  # degrees, 2 dp
    rear_toe: float


GEAR_NAMES: tuple[str, ...] = ("1st", "2nd", "3rd", "4th", "5th", "6th")


class TransmissionTune(FrozenModel):
    """Reference gearing for one track; the gear map is read-only."""

    final_drive: float
    gears: Mapping[str, float]  # keyed by GEAR_NAMES

    @field_validator("gears", mode="after")
    @classmethod
    def _freeze_gears(cls, gears: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType(dict(gears))


class CalculationError(FrozenModel):
    """Error value returned (never raised) by the calculators."""

    kind: ErrorKind
    message: str
    # Valid names offered as a recovery aid for NOT_FOUND
    available: tuple[str, ...] = ()


class TuneCreate(BaseModel):
    car: str = Field(..., min_length=1, max_length=200)
    track: Optional[str] = None
    pp: int = Field(..., ge=0)
    power: int = Field(..., ge=0)
    weight: int = Field(..., ge=0)
    author_id: str
    author_name: str
    settings: dict[str, Any] = Field(default_factory=dict)


class Tune(TuneCreate):
    id: str
    likes: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @property
    def like_count(self) -> int:
        return len(self.likes)
