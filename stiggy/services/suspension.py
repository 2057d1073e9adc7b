"""Suspension tune calculators.

Two strategies share one contract. They encode different tuning
philosophies and are not expected to agree with each other:

- COMPETITIVE: stability + lap times. Takes split front/rear downforce,
  caps aero influence at 50% of weight, and band-clamps every damper value.
- GRIP: grip / G-force oriented. Takes combined downforce with no cap,
  uses a flat 1.8 Hz baseline on both axles, and derives dampers as fixed
  fractions of frequency without clamping.

Neither strategy validates its inputs; range checks belong to the caller.
Balance values at the command bounds (30/40/60/70) and zero downforce are
safe.
"""

from dataclasses import dataclass
from typing import Callable

from stiggy.core.enums import Drivetrain, SuspensionStrategy
from stiggy.models.tune import DownforceInput, SuspensionTune
from stiggy.services.grip import resolve_grip
from stiggy.utils.converters import clamp, round_half_up, to_fixed


@dataclass(frozen=True)
class IntBand:
    low: int
    high: int

    def clamp(self, value: int) -> int:
        return int(clamp(value, self.low, self.high))


COMPRESSION_BAND = IntBand(20, 50)
REBOUND_BAND = IntBand(30, 60)
ARB_BAND = IntBand(1, 10)


# =============================================================================
# COMPETITIVE (split downforce, band-clamped)
# =============================================================================

COMPETITIVE_BASE_FREQUENCY = 2.2
COMPETITIVE_REAR_BASE_FRACTION = 0.58
# Aero can never account for more than half the frequency influence
COMPETITIVE_MAX_DF_FACTOR = 0.5
COMPETITIVE_FRONT_TOE = -0.08
COMPETITIVE_REAR_TOE = 0.10


def _competitive_tune(
    drivetrain: Drivetrain,
    weight_lbs: float,
    balance: float,
    grip: float,
    downforce: DownforceInput,
) -> SuspensionTune:
    front_df, rear_df = downforce.front, downforce.rear
    total_df = front_df + rear_df
    df_factor = min(total_df / weight_lbs, COMPETITIVE_MAX_DF_FACTOR)
    front_df_ratio = front_df / max(total_df, 1)
    rear_df_ratio = rear_df / max(total_df, 1)
    rear_driven = drivetrain.is_rear_driven

    front_freq = (
        COMPETITIVE_BASE_FREQUENCY
        + weight_lbs / 3000 * 0.6 * grip
        + (balance - 50) / 50 * 0.15
        + front_df_ratio * df_factor * 0.5
    )
    rear_freq = (
        COMPETITIVE_BASE_FREQUENCY * COMPETITIVE_REAR_BASE_FRACTION
        + weight_lbs / 3000 * 0.5 * grip
        + (50 - balance) / 50 * 0.15
        + rear_df_ratio * df_factor * 0.4
    )

    front_comp = round_half_up(30 + front_freq * 5 + grip * 5 + front_df_ratio * 5)
    rear_comp = round_half_up(28 + rear_freq * 5 + grip * 5 + rear_df_ratio * 5)
    front_rebound = round_half_up(40 + front_freq * 6 + grip * 4 + front_df_ratio * 4)
    rear_rebound = round_half_up(38 + rear_freq * 6 + grip * 4 + rear_df_ratio * 6)

    front_arb = round_half_up(
        4
        + front_freq / 3
        + (1 if drivetrain is Drivetrain.FF else 0)
        + front_df_ratio * 1.5
    )
    rear_arb = round_half_up(
        3 + rear_freq / 3 + (1 if rear_driven else 0) + rear_df_ratio * 1.2
    )

    front_height = round_half_up(95 - front_df_ratio * df_factor * 20 - grip * 5)
    rear_height = round_half_up(
        front_height - (3 if rear_driven else 0) + rear_df_ratio * df_factor * 10
    )

    # Rear camber builds on the displayed (1 dp) front value
    front_camber = to_fixed(2.0 + grip * 0.5 + front_df_ratio * df_factor * 0.4, 1)
    rear_camber = to_fixed(front_camber + 0.3 + rear_df_ratio * df_factor * 0.2, 1)

    return SuspensionTune(
        strategy=SuspensionStrategy.COMPETITIVE,
        front_ride_height=front_height,
        rear_ride_height=rear_height,
        front_frequency=to_fixed(front_freq, 2),
        rear_frequency=to_fixed(rear_freq, 2),
        front_compression=COMPRESSION_BAND.clamp(front_comp),
        rear_compression=COMPRESSION_BAND.clamp(rear_comp),
        front_rebound=REBOUND_BAND.clamp(front_rebound),
        rear_rebound=REBOUND_BAND.clamp(rear_rebound),
        front_arb=ARB_BAND.clamp(front_arb),
        rear_arb=ARB_BAND.clamp(rear_arb),
        front_camber=front_camber,
        rear_camber=rear_camber,
        front_toe=COMPETITIVE_FRONT_TOE,
        rear_toe=COMPETITIVE_REAR_TOE,
    )


# =============================================================================
# GRIP (combined downforce, unclamped dampers)
# =============================================================================

GRIP_BASE_FREQUENCY = 1.8
GRIP_COMPRESSION_FRACTION = 0.6
GRIP_REBOUND_FRACTION = 0.8
GRIP_ARB_LOADED_COEFF = 0.4  # axle carrying the weight bias
GRIP_ARB_UNLOADED_COEFF = 0.3
GRIP_ARB_DRIVEN_BONUS = 2
GRIP_FR_REAR_CAMBER_OFFSET = 0.5
GRIP_FRONT_TOE = -0.05
GRIP_REAR_TOE = 0.05


def _grip_tune(
    drivetrain: Drivetrain,
    weight_lbs: float,
    balance: float,
    grip: float,
    downforce: DownforceInput,
) -> SuspensionTune:
    df_factor = downforce.total / weight_lbs
    front_ratio = balance / 100
    rear_ratio = 1 - front_ratio

    front_height_mm = 112 - grip * 8 - df_factor * 30
    rear_height_mm = front_height_mm + 4 - df_factor * 10

    front_freq = (
        GRIP_BASE_FREQUENCY
        + weight_lbs / 1000 * 0.10 * grip
        + front_ratio * 0.6
        + df_factor * 0.8
    )
    rear_freq = (
        GRIP_BASE_FREQUENCY
        + weight_lbs / 1000 * 0.08 * grip
        + rear_ratio * 0.5
        + df_factor * 0.6
    )

    front_coeff = GRIP_ARB_LOADED_COEFF if balance > 50 else GRIP_ARB_UNLOADED_COEFF
    rear_coeff = GRIP_ARB_LOADED_COEFF if balance < 50 else GRIP_ARB_UNLOADED_COEFF
    front_bonus = GRIP_ARB_DRIVEN_BONUS if drivetrain is Drivetrain.FF else 0
    rear_bonus = GRIP_ARB_DRIVEN_BONUS if drivetrain is Drivetrain.RR else 0
    front_arb = round_half_up(2 + front_freq * front_coeff * 4 + front_bonus)
    rear_arb = round_half_up(2 + rear_freq * rear_coeff * 4 + rear_bonus)

    front_camber = to_fixed(1.5 + grip * 0.8 + df_factor * 1.0, 1)
    if drivetrain is Drivetrain.FR:
        rear_camber = to_fixed(front_camber + GRIP_FR_REAR_CAMBER_OFFSET, 1)
    else:
        rear_camber = front_camber

    return SuspensionTune(
        strategy=SuspensionStrategy.GRIP,
        front_ride_height=round_half_up(front_height_mm),
        rear_ride_height=round_half_up(rear_height_mm),
        front_frequency=to_fixed(front_freq, 2),
        rear_frequency=to_fixed(rear_freq, 2),
        # No band clamp here: dampers track frequency directly
        front_compression=to_fixed(front_freq * GRIP_COMPRESSION_FRACTION, 2),
        rear_compression=to_fixed(rear_freq * GRIP_COMPRESSION_FRACTION, 2),
        front_rebound=to_fixed(front_freq * GRIP_REBOUND_FRACTION, 2),
        rear_rebound=to_fixed(rear_freq * GRIP_REBOUND_FRACTION, 2),
        front_arb=ARB_BAND.clamp(front_arb),
        rear_arb=ARB_BAND.clamp(rear_arb),
        front_camber=front_camber,
        rear_camber=rear_camber,
        front_toe=GRIP_FRONT_TOE,
        rear_toe=GRIP_REAR_TOE,
    )


_STRATEGIES: dict[
    SuspensionStrategy,
    Callable[[Drivetrain, float, float, float, DownforceInput], SuspensionTune],
] = {
    SuspensionStrategy.COMPETITIVE: _competitive_tune,
    SuspensionStrategy.GRIP: _grip_tune,
}


def compute_suspension_tune(
    drivetrain: Drivetrain | str,
    weight_lbs: float,
    front_balance_percent: float,
    tire: str,
    downforce: DownforceInput,
    strategy: SuspensionStrategy = SuspensionStrategy.COMPETITIVE,
) -> SuspensionTune:
    """Recommend a full suspension setup.

    Args:
        drivetrain: FF, FR, MR or RR
        weight_lbs: Car weight in pounds
        front_balance_percent: Front weight balance (e.g. 55 for 55/45)
        tire: Compound code in any case
        downforce: Split front/rear (COMPETITIVE) or combined (GRIP) load
        strategy: Which tuning philosophy to apply

    Returns:
        SuspensionTune with camber as a positive magnitude; callers render
        it negative.
    """
    layout = Drivetrain(drivetrain.upper()) if isinstance(drivetrain, str) else drivetrain
    grip = resolve_grip(tire)
    return _STRATEGIES[strategy](layout, weight_lbs, front_balance_percent, grip, downforce)
