"""
In-memory stand-in for GatewayClient.

Implements the same methods as gateway.client.GatewayClient against a
dict of volumes, records every call, and can be told to fail a method.
"""

from typing import Dict, List, Optional

from gateway.client import REMOVE_MODE_ONLY_ME, THIN_PROVISIONED
from gateway.errors import GatewayAlreadyExistsError, GatewayError, GatewayNotFoundError
from gateway.models import MappedSdcInfo, Sdc, Statistics, StoragePool, System, Volume

MUTATIONS = {"create_volume", "remove_volume", "map_volume_to_sdc", "unmap_volume_from_sdc"}


class FakeGateway:

    def __init__(self):
        self.token = ""
        self.systems = [System(id="sys-1", name="cluster-a")]
        self.pools = [
            StoragePool(id="pool-id-1", name="pool-1"),
            StoragePool(id="pool-id-2", name="pool-2"),
        ]
        self.sdcs = [
            Sdc(id="sdc-a", sdc_guid="GUID-NODE-A"),
            Sdc(id="sdc-b", sdc_guid="GUID-NODE-B"),
            Sdc(id="sdc-c", sdc_guid="GUID-NODE-C"),
        ]
        self.volumes: Dict[str, Volume] = {}
        self.system_stats = Statistics(capacity_available_for_volume_allocation_in_kb=1000)
        self.pool_stats = {
            "pool-id-1": Statistics(capacity_available_for_volume_allocation_in_kb=300),
            "pool-id-2": Statistics(capacity_available_for_volume_allocation_in_kb=700),
        }
        self.calls: List[str] = []
        self.failures: Dict[str, GatewayError] = {}
        self.remove_modes: List[str] = []
        self.map_args: List[dict] = []
        self.unmap_args: List[dict] = []
        self._next_id = 1

    # helpers used by tests

    def fail(self, method: str, error: Optional[GatewayError] = None) -> None:
        self.failures[method] = error or GatewayError(f"{method} exploded")

    def mutation_count(self) -> int:
        return sum(1 for c in self.calls if c in MUTATIONS)

    def add_volume(self, name: str, size_kib: int = 8 * 1024 * 1024, pool_id: str = "pool-id-1",
                   multi_map: bool = False, mapped: Optional[List[str]] = None) -> Volume:
        vol_id = f"vol-{self._next_id:04d}"
        self._next_id += 1
        vol = Volume(
            id=vol_id,
            name=name,
            size_in_kb=size_kib,
            storage_pool_id=pool_id,
            creation_time=1700000000,
            mapping_to_all_sdcs_enabled=multi_map,
            mapped_sdc_info=[MappedSdcInfo(sdc_id=s) for s in (mapped or [])],
        )
        self.volumes[vol_id] = vol
        return vol

    def _enter(self, method: str) -> None:
        self.calls.append(method)
        if method in self.failures:
            raise self.failures[method]

    # GatewayClient surface

    def get_token(self) -> str:
        return self.token

    def authenticate(self) -> str:
        self._enter("authenticate")
        self.token = "token-1"
        return self.token

    def find_system(self, name: str) -> System:
        self._enter("find_system")
        for system in self.systems:
            if system.name == name:
                return system
        raise GatewayNotFoundError(f"system '{name}' not found")

    def find_storage_pool(self, name: str) -> StoragePool:
        self._enter("find_storage_pool")
        for pool in self.pools:
            if pool.name == name:
                return pool
        raise GatewayNotFoundError(f"storage pool '{name}' not found")

    def find_sdc_id(self, node_id: str) -> str:
        self._enter("find_sdc_id")
        for sdc in self.sdcs:
            if sdc.sdc_guid == node_id or sdc.id == node_id:
                return sdc.id
        raise GatewayNotFoundError(f"no SDC found for node '{node_id}'")

    def get_system_statistics(self, system_id: str) -> Statistics:
        self._enter("get_system_statistics")
        return self.system_stats

    def get_pool_statistics(self, pool_id: str) -> Statistics:
        self._enter("get_pool_statistics")
        return self.pool_stats[pool_id]

    def create_volume(self, name: str, size_kib: int, pool_id: str, volume_type: str = THIN_PROVISIONED) -> str:
        self._enter("create_volume")
        if any(v.name == name for v in self.volumes.values()):
            raise GatewayAlreadyExistsError("Volume name already in use. Please use a different name.")
        vol = self.add_volume(name, size_kib=size_kib, pool_id=pool_id)
        vol.volume_type = volume_type
        return vol.id

    def find_volume_id(self, name: str) -> str:
        self._enter("find_volume_id")
        for vol in self.volumes.values():
            if vol.name == name:
                return vol.id
        raise GatewayNotFoundError("Not found")

    def get_volume(self, volume_id: str) -> Volume:
        self._enter("get_volume")
        if volume_id not in self.volumes:
            raise GatewayNotFoundError("Could not find the volume")
        return self.volumes[volume_id].model_copy(deep=True)

    def list_volumes(self) -> List[Volume]:
        self._enter("list_volumes")
        return [v.model_copy(deep=True) for v in self.volumes.values()]

    def remove_volume(self, volume_id: str, mode: str = REMOVE_MODE_ONLY_ME) -> None:
        self._enter("remove_volume")
        self.remove_modes.append(mode)
        del self.volumes[volume_id]

    def map_volume_to_sdc(self, volume_id: str, sdc_id: str, allow_multiple: bool = False) -> None:
        self._enter("map_volume_to_sdc")
        self.map_args.append({"volume_id": volume_id, "sdc_id": sdc_id, "allow_multiple": allow_multiple})
        self.volumes[volume_id].mapped_sdc_info.append(MappedSdcInfo(sdc_id=sdc_id))

    def unmap_volume_from_sdc(self, volume_id: str, sdc_id: str, ignore_scsi_initiators: bool = True) -> None:
        self._enter("unmap_volume_from_sdc")
        self.unmap_args.append({
            "volume_id": volume_id, "sdc_id": sdc_id, "ignore_scsi_initiators": ignore_scsi_initiators,
        })
        vol = self.volumes[volume_id]
        vol.mapped_sdc_info = [m for m in vol.mapped_sdc_info if m.sdc_id != sdc_id]
