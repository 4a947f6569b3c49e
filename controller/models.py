"""
Controller request and response models.

Pydantic mirrors of the CSI controller messages. Field names follow the
protobuf field names so JSON bodies read the same as the CSI messages.
"""

import enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

# ============================================================================
# ENUM DEFINITIONS
# ============================================================================

class AccessModeType(str, enum.Enum):
    """Requested sharing semantics of an attachment"""
    UNKNOWN = "UNKNOWN"
    SINGLE_NODE_WRITER = "SINGLE_NODE_WRITER"
    SINGLE_NODE_READER_ONLY = "SINGLE_NODE_READER_ONLY"
    MULTI_NODE_READER_ONLY = "MULTI_NODE_READER_ONLY"
    MULTI_NODE_SINGLE_WRITER = "MULTI_NODE_SINGLE_WRITER"
    MULTI_NODE_MULTI_WRITER = "MULTI_NODE_MULTI_WRITER"


SINGLE_NODE_MODES = frozenset({
    AccessModeType.SINGLE_NODE_WRITER,
    AccessModeType.SINGLE_NODE_READER_ONLY,
})


class ControllerCapability(str, enum.Enum):
    """Controller RPCs advertised to the orchestrator"""
    CREATE_DELETE_VOLUME = "CREATE_DELETE_VOLUME"
    PUBLISH_UNPUBLISH_VOLUME = "PUBLISH_UNPUBLISH_VOLUME"
    LIST_VOLUMES = "LIST_VOLUMES"
    GET_CAPACITY = "GET_CAPACITY"


# ============================================================================
# SHARED MESSAGES
# ============================================================================

class CapacityRange(BaseModel):
    required_bytes: int = 0
    limit_bytes: int = 0


class BlockVolume(BaseModel):
    pass


class MountVolume(BaseModel):
    fs_type: str = ""
    mount_flags: List[str] = Field(default_factory=list)


class AccessMode(BaseModel):
    mode: AccessModeType = AccessModeType.UNKNOWN


class VolumeCapability(BaseModel):
    """One way a volume will be consumed: access type plus access mode"""
    block: Optional[BlockVolume] = None
    mount: Optional[MountVolume] = None
    access_mode: Optional[AccessMode] = None

    @property
    def is_block(self) -> bool:
        return self.block is not None


class VolumeInfo(BaseModel):
    id: str
    capacity_bytes: int = 0
    attributes: Dict[str, str] = Field(default_factory=dict)


# ============================================================================
# RPC MESSAGES
# ============================================================================

class CreateVolumeRequest(BaseModel):
    name: str = ""
    capacity_range: Optional[CapacityRange] = None
    volume_capabilities: List[VolumeCapability] = Field(default_factory=list)
    parameters: Dict[str, str] = Field(default_factory=dict)


class CreateVolumeResponse(BaseModel):
    volume: VolumeInfo


class DeleteVolumeRequest(BaseModel):
    volume_id: str = ""


class DeleteVolumeResponse(BaseModel):
    pass


class ControllerPublishVolumeRequest(BaseModel):
    volume_id: str = ""
    node_id: str = ""
    volume_capability: Optional[VolumeCapability] = None
    readonly: bool = False
    volume_attributes: Dict[str, str] = Field(default_factory=dict)


class ControllerPublishVolumeResponse(BaseModel):
    publish_info: Dict[str, str] = Field(default_factory=dict)


class ControllerUnpublishVolumeRequest(BaseModel):
    volume_id: str = ""
    node_id: str = ""


class ControllerUnpublishVolumeResponse(BaseModel):
    pass


class ValidateVolumeCapabilitiesRequest(BaseModel):
    volume_id: str = ""
    volume_capabilities: List[VolumeCapability] = Field(default_factory=list)
    volume_attributes: Dict[str, str] = Field(default_factory=dict)


class ValidateVolumeCapabilitiesResponse(BaseModel):
    supported: bool
    message: str = ""


class ListVolumesRequest(BaseModel):
    max_entries: int = 0
    starting_token: str = ""


class ListVolumesEntry(BaseModel):
    volume: VolumeInfo


class ListVolumesResponse(BaseModel):
    entries: List[ListVolumesEntry] = Field(default_factory=list)
    next_token: str = ""


class GetCapacityRequest(BaseModel):
    volume_capabilities: List[VolumeCapability] = Field(default_factory=list)
    parameters: Dict[str, str] = Field(default_factory=dict)


class GetCapacityResponse(BaseModel):
    available_capacity: int


class ControllerGetCapabilitiesResponse(BaseModel):
    capabilities: List[ControllerCapability]


class ProbeResponse(BaseModel):
    ready: bool
    state: str
