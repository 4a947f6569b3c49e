"""
Volume size normalization.

PowerFlex allocates volumes in multiples of 8 GiB. Requested sizes are
rounded up to that granularity before they are sent to the gateway, and the
rounded size must still fit under the caller's limit.
"""

from typing import Optional

from controller.errors import ControllerError, StatusCode, invalid_argument
from controller.models import CapacityRange

BYTES_IN_KIB = 1024
KIB_IN_GIB = 1024 * 1024
BYTES_IN_GIB = KIB_IN_GIB * BYTES_IN_KIB

# Volume sizes are always a multiple of this
VOL_SIZE_MULTIPLE_GIB = 8

DEFAULT_VOLUME_SIZE_GIB = 16
DEFAULT_VOLUME_SIZE_KIB = DEFAULT_VOLUME_SIZE_GIB * KIB_IN_GIB


def validate_vol_size(cr: Optional[CapacityRange]) -> int:
    """
    Work out the size of the volume to create.

    Args:
        cr: Requested capacity range (None means no preference)

    Returns:
        Size to request from the gateway, in KiB

    Raises:
        ControllerError: OUT_OF_RANGE when the rounded size exceeds limit_bytes
    """
    required = cr.required_bytes if cr else 0
    limit = cr.limit_bytes if cr else 0

    if required < 0 or limit < 0:
        raise invalid_argument("capacity range values cannot be negative")

    if required == 0:
        required = DEFAULT_VOLUME_SIZE_KIB * BYTES_IN_KIB

    unit = VOL_SIZE_MULTIPLE_GIB * BYTES_IN_GIB
    size_bytes = -(-required // unit) * unit

    if limit != 0 and size_bytes > limit:
        raise ControllerError(
            StatusCode.OUT_OF_RANGE,
            f"volume size {size_bytes} > limit_bytes: {limit}",
        )

    return size_bytes // BYTES_IN_KIB
