"""Downforce / natural frequency calculator tests.

Pure math, no Discord or database involved.

Usage:
    pytest tests/test_aero.py -v
"""

import pytest

from stiggy.core.enums import ErrorKind, TireCompound
from stiggy.models.tune import AeroTune, CalculationError
from stiggy.services.aero import FRONT_WEIGHT_ERROR, compute_aero_tune
from stiggy.services.grip import GRIP_BY_COMPOUND, resolve_grip, tire_display_name


# =============================================================================
# Grip table
# =============================================================================

class TestGripTable:

    def test_every_compound_has_grip(self):
        for compound in TireCompound:
            assert compound.value in GRIP_BY_COMPOUND

    def test_lookup_is_case_insensitive(self):
        assert resolve_grip("rs") == 1.33
        assert resolve_grip("Rs") == 1.33

    def test_unknown_compound_is_neutral(self):
        assert resolve_grip("XX") == 1.0
        assert tire_display_name("xx") == "XX"

    def test_display_names(self):
        assert tire_display_name("sm") == "Sports Medium"


# =============================================================================
# Calculation
# =============================================================================

class TestComputeAeroTune:

    def test_racing_soft_reference_car(self):
        tune = compute_aero_tune(3000, 54, "rs")
        assert isinstance(tune, AeroTune)
        assert tune.grip == 1.33
        assert tune.front_frequency == 2.82
        assert tune.rear_frequency == 2.50
        assert tune.front_downforce == 237.0
        assert tune.rear_downforce == 201.9
        assert tune.tire_display == "Racing Soft"

    def test_compound_code_is_case_insensitive(self):
        assert compute_aero_tune(3000, 54, "RS") == compute_aero_tune(3000, 54, "rs")

    def test_repeat_calls_are_identical(self):
        assert compute_aero_tune(2750, 47.5, "SM") == compute_aero_tune(2750, 47.5, "SM")

    def test_frequency_split_ignores_weight_distribution(self):
        a = compute_aero_tune(2000, 35, "SH")
        b = compute_aero_tune(4500, 65, "SH")
        assert a.front_frequency == b.front_frequency
        assert a.rear_frequency == b.rear_frequency
        assert a.front_frequency > a.rear_frequency

    def test_unknown_tire_uses_neutral_grip(self):
        tune = compute_aero_tune(3000, 50, "zz")
        assert tune.grip == 1.0
        assert tune.front_frequency == 2.12
        assert tune.rear_frequency == 1.88
        assert tune.tire_display == "ZZ"

    def test_downforce_capped_at_300(self):
        tune = compute_aero_tune(5000, 70, "RS")
        assert tune.front_downforce == 300.0
        assert tune.rear_downforce < 300.0

    @pytest.mark.parametrize("front", [30, 70])
    def test_boundary_weight_distribution_accepted(self, front):
        assert isinstance(compute_aero_tune(3000, front, "SM"), AeroTune)

    @pytest.mark.parametrize("front", [29, 29.9, 70.1, 71])
    def test_out_of_range_weight_distribution(self, front):
        result = compute_aero_tune(3000, front, "SM")
        assert isinstance(result, CalculationError)
        assert result.kind == ErrorKind.VALIDATION
        assert result.message == FRONT_WEIGHT_ERROR

    def test_outputs_stay_in_range(self):
        tires = [c.value for c in TireCompound] + ["zz"]
        for weight in (1000, 2500, 5000):
            for front in (30, 50, 70):
                for tire in tires:
                    tune = compute_aero_tune(weight, front, tire)
                    assert 0 <= tune.front_downforce <= 300
                    assert 0 <= tune.rear_downforce <= 300
                    assert 1.40 <= tune.front_frequency <= 3.30
                    assert 1.40 <= tune.rear_frequency <= 3.30

    def test_grippier_tires_never_reduce_downforce(self):
        by_grip = sorted(GRIP_BY_COMPOUND, key=GRIP_BY_COMPOUND.get)
        previous = -1.0
        for tire in by_grip:
            tune = compute_aero_tune(2000, 50, tire)
            assert tune.front_downforce >= previous
            previous = tune.front_downforce
