from stiggy.models.tune import (
    GEAR_NAMES,
    AeroTune,
    CalculationError,
    DownforceInput,
    SuspensionTune,
    TransmissionTune,
    Tune,
    TuneCreate,
    VehicleSpec,
)

__all__ = [
    "GEAR_NAMES",
    "AeroTune",
    "CalculationError",
    "DownforceInput",
    "SuspensionTune",
    "TransmissionTune",
    "Tune",
    "TuneCreate",
    "VehicleSpec",
]
