from typing import Iterable, Sequence, Tuple

from controller.errors import invalid_argument
from controller.models import AccessModeType, VolumeCapability
from gateway.models import Volume

ERR_NO_MULTI_MAP = "volume not enabled for mapping to multiple hosts"
ERR_UNKNOWN_ACCESS_MODE = "access mode cannot be UNKNOWN"
ERR_NO_MULTI_NODE_WRITER = "multi-node with writer(s) only supported for block access type"

BLOCK_MODES = frozenset({
    AccessModeType.SINGLE_NODE_WRITER,
    AccessModeType.MULTI_NODE_MULTI_WRITER,
})

MOUNT_MODES = frozenset({
    AccessModeType.SINGLE_NODE_WRITER,
    AccessModeType.SINGLE_NODE_READER_ONLY,
    AccessModeType.MULTI_NODE_READER_ONLY,
})


def access_type_is_block(capabilities: Iterable[VolumeCapability]) -> bool:
    """True when any capability in the set asks for raw block access."""
    return any(cap.is_block for cap in capabilities)


def access_type_allows(mode: AccessModeType, is_block: bool) -> bool:
    allowed = BLOCK_MODES if is_block else MOUNT_MODES
    return mode in allowed


def validate_access_type(mode: AccessModeType, is_block: bool) -> None:
    if not access_type_allows(mode, is_block):
        raise invalid_argument(f"Access mode: {mode.value} not compatible with access type")


def validate_volume_capabilities(
    capabilities: Sequence[VolumeCapability],
    volume: Volume,
) -> Tuple[bool, str]:
    """
    Check a set of capabilities against an existing volume.

    Returns (supported, reason). The reason is the last failure found while
    walking the set, empty when everything is supported.
    """
    supported = True
    reason = ""
    is_block = access_type_is_block(capabilities)
    multi_map = volume.mapping_to_all_sdcs_enabled

    for cap in capabilities:
        if cap.access_mode is None:
            continue
        mode = cap.access_mode.mode

        if mode == AccessModeType.UNKNOWN:
            supported = False
            reason = ERR_UNKNOWN_ACCESS_MODE
        elif mode == AccessModeType.MULTI_NODE_READER_ONLY:
            if not multi_map:
                supported = False
                reason = ERR_NO_MULTI_MAP
        elif mode in (AccessModeType.MULTI_NODE_SINGLE_WRITER, AccessModeType.MULTI_NODE_MULTI_WRITER):
            if not multi_map:
                supported = False
                reason = ERR_NO_MULTI_MAP
            if not is_block:
                supported = False
                reason = ERR_NO_MULTI_NODE_WRITER

    return supported, reason
