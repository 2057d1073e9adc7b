"""Grip-optimized downforce and natural frequency calculator.

## Formulas

### Natural frequency (Hz)
    base_nf  = grip × 2.0
    front_nf = clamp(base_nf × 1.06, 1.40, 3.30)
    rear_nf  = clamp(base_nf × 0.94, 1.40, 3.30)

The 1.06 / 0.94 split is a fixed front-stiffer bias; it does not depend on
weight distribution.

### Downforce (lbs)
    axle_weight = weight × axle_ratio
    axle_df     = clamp(axle_weight × grip × 0.11, 0, 300)

Outputs are rounded for display: downforce to 1 dp, frequency and grip to
2 dp.
"""

from stiggy.core.enums import ErrorKind
from stiggy.models.tune import AeroTune, CalculationError
from stiggy.services.grip import resolve_grip, tire_display_name
from stiggy.utils.converters import clamp, to_fixed

# =============================================================================
# CONSTANTS
# =============================================================================

MIN_FRONT_WEIGHT_PERCENT = 30
MAX_FRONT_WEIGHT_PERCENT = 70
FRONT_WEIGHT_ERROR = "Front weight % must be between 30 and 70."

BASE_FREQUENCY_PER_GRIP = 2.0
FRONT_FREQUENCY_BIAS = 1.06
REAR_FREQUENCY_BIAS = 0.94
MIN_FREQUENCY_HZ = 1.40
MAX_FREQUENCY_HZ = 3.30

# lbs of downforce per lb of axle weight per unit grip
DOWNFORCE_PER_LB = 0.11
MAX_DOWNFORCE_LBS = 300


def compute_aero_tune(
    weight_lbs: float,
    front_weight_percent: float,
    tire: str,
) -> AeroTune | CalculationError:
    """Recommend downforce and natural frequency for a car.

    Args:
        weight_lbs: Car weight in pounds
        front_weight_percent: Front weight distribution, 30-70 inclusive
        tire: Compound code in any case (e.g. "rs", "RS")

    Returns:
        AeroTune, or a VALIDATION CalculationError when the weight
        distribution is out of range

    Example:
        >>> compute_aero_tune(3000, 54, "rs").front_downforce
        237.0
    """
    if not MIN_FRONT_WEIGHT_PERCENT <= front_weight_percent <= MAX_FRONT_WEIGHT_PERCENT:
        return CalculationError(kind=ErrorKind.VALIDATION, message=FRONT_WEIGHT_ERROR)

    grip = resolve_grip(tire)

    front_ratio = front_weight_percent / 100
    rear_ratio = 1 - front_ratio
    front_weight = weight_lbs * front_ratio
    rear_weight = weight_lbs * rear_ratio

    base_nf = grip * BASE_FREQUENCY_PER_GRIP
    front_nf = clamp(base_nf * FRONT_FREQUENCY_BIAS, MIN_FREQUENCY_HZ, MAX_FREQUENCY_HZ)
    rear_nf = clamp(base_nf * REAR_FREQUENCY_BIAS, MIN_FREQUENCY_HZ, MAX_FREQUENCY_HZ)

    front_df = clamp(front_weight * grip * DOWNFORCE_PER_LB, 0, MAX_DOWNFORCE_LBS)
    rear_df = clamp(rear_weight * grip * DOWNFORCE_PER_LB, 0, MAX_DOWNFORCE_LBS)

    return AeroTune(
        front_downforce=to_fixed(front_df, 1),
        rear_downforce=to_fixed(rear_df, 1),
        front_frequency=to_fixed(front_nf, 2),
        rear_frequency=to_fixed(rear_nf, 2),
        grip=to_fixed(grip, 2),
        tire_display=tire_display_name(tire),
    )
