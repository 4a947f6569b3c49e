"""
Unit tests for volume size normalization.
"""

import pytest

from controller.errors import ControllerError, StatusCode
from controller.models import CapacityRange
from controller.services.sizing import DEFAULT_VOLUME_SIZE_KIB, validate_vol_size
from tests.conftest import GIB, KIB_IN_GIB


class TestDefaultSize:

    def test_no_range_uses_default(self):
        assert validate_vol_size(None) == 16 * KIB_IN_GIB

    def test_zero_required_and_limit_uses_default(self):
        assert validate_vol_size(CapacityRange(required_bytes=0, limit_bytes=0)) == DEFAULT_VOLUME_SIZE_KIB

    def test_default_over_limit_is_out_of_range(self):
        with pytest.raises(ControllerError) as exc:
            validate_vol_size(CapacityRange(required_bytes=0, limit_bytes=8 * GIB))
        assert exc.value.code == StatusCode.OUT_OF_RANGE


class TestRounding:

    @pytest.mark.parametrize("required,expected_gib", [
        (1, 8),
        (GIB, 8),
        (8 * GIB, 8),
        (8 * GIB + 1, 16),
        (17 * GIB, 24),
        (100 * GIB, 104),
    ])
    def test_rounds_up_to_multiple_of_8_gib(self, required, expected_gib):
        assert validate_vol_size(CapacityRange(required_bytes=required)) == expected_gib * KIB_IN_GIB

    def test_limit_equal_to_rounded_size_is_accepted(self):
        size = validate_vol_size(CapacityRange(required_bytes=5 * GIB, limit_bytes=8 * GIB))
        assert size == 8 * KIB_IN_GIB

    def test_rounded_size_over_limit_is_out_of_range(self):
        with pytest.raises(ControllerError) as exc:
            validate_vol_size(CapacityRange(required_bytes=5 * GIB, limit_bytes=6 * GIB))
        assert exc.value.code == StatusCode.OUT_OF_RANGE
        assert "limit_bytes" in exc.value.message

    def test_negative_values_are_invalid(self):
        with pytest.raises(ControllerError) as exc:
            validate_vol_size(CapacityRange(required_bytes=-1))
        assert exc.value.code == StatusCode.INVALID_ARGUMENT
