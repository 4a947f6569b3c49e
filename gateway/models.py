"""
Gateway object models.

Pydantic views over the JSON documents returned by the PowerFlex gateway.
Field names follow Python conventions; aliases carry the gateway's
camelCase keys. Unknown keys are ignored.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GatewayModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MappedSdcInfo(GatewayModel):
    """One SDC (host) mapping of a volume"""
    sdc_id: str = Field(alias="sdcId")
    sdc_ip: Optional[str] = Field(default=None, alias="sdcIp")


class Volume(GatewayModel):
    id: str
    name: str = ""
    size_in_kb: int = Field(default=0, alias="sizeInKb")
    storage_pool_id: str = Field(default="", alias="storagePoolId")
    volume_type: str = Field(default="ThinProvisioned", alias="volumeType")
    creation_time: int = Field(default=0, alias="creationTime")
    mapping_to_all_sdcs_enabled: bool = Field(default=False, alias="mappingToAllSdcsEnabled")
    mapped_sdc_info: List[MappedSdcInfo] = Field(default_factory=list, alias="mappedSdcInfo")

    @field_validator("mapped_sdc_info", mode="before")
    @classmethod
    def _null_mappings(cls, v):
        # gateway sends null for unmapped volumes
        return v or []

    @property
    def mapped_sdc_ids(self) -> List[str]:
        return [m.sdc_id for m in self.mapped_sdc_info]

    def is_mapped_to(self, sdc_id: str) -> bool:
        return sdc_id in self.mapped_sdc_ids


class StoragePool(GatewayModel):
    id: str
    name: str = ""
    protection_domain_id: Optional[str] = Field(default=None, alias="protectionDomainId")


class System(GatewayModel):
    id: str
    name: str = ""


class Sdc(GatewayModel):
    id: str
    name: Optional[str] = None
    sdc_guid: str = Field(default="", alias="sdcGuid")
    sdc_ip: Optional[str] = Field(default=None, alias="sdcIp")


class Statistics(GatewayModel):
    capacity_available_for_volume_allocation_in_kb: int = Field(
        default=0, alias="capacityAvailableForVolumeAllocationInKb"
    )
