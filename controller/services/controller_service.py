"""
CSI Controller Service

Turns the orchestrator's volume lifecycle verbs into PowerFlex gateway calls.

Every operation follows the same path:
1. Make sure the gateway session is ready (SessionProbe)
2. Validate the request before touching the network
3. Re-read the authoritative volume state from the gateway
4. Decide: idempotent success, conflict, or proceed
5. Mutate through the gateway; create/delete also clear the list cache

No per-volume locks are taken. Racing calls are resolved by the gateway's
own state: the loser surfaces as a conflict because every mutation re-reads
the volume right before acting. Nothing is retried here.
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from controller.config import KEY_STORAGE_POOL, KEY_THICK_PROVISIONING, ControllerOptions
from controller.errors import (
    ControllerError,
    StatusCode,
    failed_precondition,
    internal,
    invalid_argument,
    not_found,
)
from controller.models import (
    SINGLE_NODE_MODES,
    AccessModeType,
    ControllerCapability,
    ControllerGetCapabilitiesResponse,
    ControllerPublishVolumeRequest,
    ControllerPublishVolumeResponse,
    ControllerUnpublishVolumeRequest,
    ControllerUnpublishVolumeResponse,
    CreateVolumeRequest,
    CreateVolumeResponse,
    DeleteVolumeRequest,
    DeleteVolumeResponse,
    GetCapacityRequest,
    GetCapacityResponse,
    ListVolumesEntry,
    ListVolumesRequest,
    ListVolumesResponse,
    ProbeResponse,
    ValidateVolumeCapabilitiesRequest,
    ValidateVolumeCapabilitiesResponse,
    VolumeInfo,
)
from controller.services.capability_guard import (
    ERR_NO_MULTI_MAP,
    ERR_UNKNOWN_ACCESS_MODE,
    access_type_is_block,
    validate_access_type,
    validate_volume_capabilities,
)
from controller.services.probe import ClientFactory, SessionProbe
from controller.services.sizing import BYTES_IN_KIB, validate_vol_size
from controller.services.volume_cache import VolumeListCache
from gateway.client import REMOVE_MODE_ONLY_ME, THICK_PROVISIONED, THIN_PROVISIONED, GatewayClient
from gateway.errors import GatewayAlreadyExistsError, GatewayError, GatewayNotFoundError
from gateway.models import Volume

logger = logging.getLogger(__name__)

# ListVolumes tokens are plain unsigned 32-bit decimal offsets
_TOKEN_RE = re.compile(r"[0-9]+")
_MAX_TOKEN = 2**32 - 1

ADVERTISED_CAPABILITIES = [
    ControllerCapability.CREATE_DELETE_VOLUME,
    ControllerCapability.PUBLISH_UNPUBLISH_VOLUME,
    ControllerCapability.LIST_VOLUMES,
    ControllerCapability.GET_CAPACITY,
]


def to_volume_info(vol: Volume) -> VolumeInfo:
    """Convert a gateway volume into the orchestrator's view of it."""
    created = datetime.fromtimestamp(vol.creation_time, tz=timezone.utc)
    return VolumeInfo(
        id=vol.id,
        capacity_bytes=vol.size_in_kb * BYTES_IN_KIB,
        attributes={
            "Name": vol.name,
            "StoragePoolID": vol.storage_pool_id,
            "CreationTime": created.isoformat(),
        },
    )


class ControllerService:
    """
    Controller half of the PowerFlex CSI plugin.
    """

    def __init__(self, opts: ControllerOptions, client_factory: Optional[ClientFactory] = None):
        """
        Initialize controller service.

        Args:
            opts: Gateway connection and behaviour options
            client_factory: Builds the gateway client on first probe
                            (defaults to a requests-based GatewayClient)
        """
        self.opts = opts
        self.session = SessionProbe(opts, client_factory)
        self.vol_cache = VolumeListCache()

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _client(self) -> GatewayClient:
        return self.session.require()

    def _volume_type(self, params: dict) -> str:
        thick = self.opts.thick_provisioning
        raw = params.get(KEY_THICK_PROVISIONING)
        if raw is not None:
            thick = str(raw).strip().lower() in {"1", "true", "yes"}
        return THICK_PROVISIONED if thick else THIN_PROVISIONED

    def _get_volume(self, client: GatewayClient, volume_id: str, action: str) -> Volume:
        try:
            return client.get_volume(volume_id)
        except GatewayNotFoundError:
            raise not_found("volume not found")
        except GatewayError as e:
            raise internal(f"failure checking volume status {action}: {e}") from e

    def _get_sdc_id(self, client: GatewayClient, node_id: str) -> str:
        try:
            return client.find_sdc_id(node_id)
        except GatewayNotFoundError as e:
            raise not_found(str(e)) from e
        except GatewayError as e:
            raise internal(f"unable to resolve node {node_id}: {e}") from e

    def _storage_pool_id(self, client: GatewayClient, name: str) -> str:
        try:
            return client.find_storage_pool(name).id
        except GatewayNotFoundError as e:
            raise not_found(f"storage pool not found: {name}") from e
        except GatewayError as e:
            raise internal(f"unable to look up storage pool: {name}, err: {e}") from e

    # ========================================================================
    # PROBE
    # ========================================================================

    def probe(self) -> ProbeResponse:
        self.session.probe()
        return ProbeResponse(ready=self.session.ready, state=self.session.state.value)

    # ========================================================================
    # VOLUME CREATION / DELETION
    # ========================================================================

    def create_volume(self, req: CreateVolumeRequest) -> CreateVolumeResponse:
        """
        Create a volume, or adopt an existing one with the same name.

        A name clash on the gateway is treated as a repeat of an earlier
        call. The existing volume is accepted only if it lives in the
        requested pool and has the requested (rounded) size.
        """
        name = req.name
        if not name:
            raise invalid_argument("'name' cannot be empty")

        params = req.parameters
        pool_name = params.get(KEY_STORAGE_POOL)
        if not pool_name:
            raise invalid_argument(f"`{KEY_STORAGE_POOL}` is a required parameter")

        size_kib = validate_vol_size(req.capacity_range)
        vol_type = self._volume_type(params)

        client = self._client()
        logger.info(f"Creating volume name={name} size_kib={size_kib} storage_pool={pool_name} type={vol_type}")

        pool_id = self._storage_pool_id(client, pool_name)

        try:
            vol_id = client.create_volume(name, size_kib, pool_id, vol_type)
        except GatewayAlreadyExistsError:
            logger.debug(f"Volume '{name}' already exists, looking it up by name")
            try:
                vol_id = client.find_volume_id(name)
            except GatewayError as e:
                raise internal(f"volume '{name}' exists but could not be found by name: {e}") from e
        except GatewayError as e:
            logger.error(f"Volume creation failed for '{name}': {e}")
            raise internal(f"error when creating volume: {e}") from e

        try:
            vol = client.get_volume(vol_id)
        except GatewayError as e:
            raise ControllerError(StatusCode.UNAVAILABLE, f"error retrieving volume details: {e}") from e

        # the volume may have existed before this call
        if vol.storage_pool_id != pool_id:
            raise ControllerError(
                StatusCode.UNAVAILABLE,
                "volume exists, but in different storage pool than requested",
            )
        if vol.size_in_kb != size_kib:
            raise ControllerError(
                StatusCode.UNAVAILABLE,
                "volume exists, but at different size than requested",
            )

        self.vol_cache.clear()
        return CreateVolumeResponse(volume=to_volume_info(vol))

    def delete_volume(self, req: DeleteVolumeRequest) -> DeleteVolumeResponse:
        vol_id = req.volume_id
        if not vol_id:
            raise invalid_argument("volumeID is required")

        client = self._client()

        try:
            vol = client.get_volume(vol_id)
        except GatewayNotFoundError:
            logger.debug(f"Volume {vol_id} already deleted")
            return DeleteVolumeResponse()
        except GatewayError as e:
            raise internal(f"failure checking volume status before deletion: {e}") from e

        if vol.mapped_sdc_info:
            raise failed_precondition(f"volume in use by {vol.mapped_sdc_info[0].sdc_id}")

        logger.info(f"Deleting volume id={vol_id} name={vol.name}")
        try:
            client.remove_volume(vol_id, REMOVE_MODE_ONLY_ME)
        except GatewayError as e:
            logger.error(f"Volume removal failed for {vol_id}: {e}")
            raise internal(f"error removing volume: {e}") from e

        self.vol_cache.clear()
        return DeleteVolumeResponse()

    # ========================================================================
    # VOLUME MAPPING (PUBLISH / UNPUBLISH)
    # ========================================================================

    def controller_publish_volume(self, req: ControllerPublishVolumeRequest) -> ControllerPublishVolumeResponse:
        """
        Map a volume to the SDC of a node.

        A volume with no mappings is mapped right away. A volume that is
        already mapped elsewhere is only mapped again for a multi-node access
        mode, on a multi-map enabled volume, with a compatible access type.
        """
        vol_id = req.volume_id
        if not vol_id:
            raise invalid_argument("volumeID is required")
        node_id = req.node_id
        if not node_id:
            raise invalid_argument("node ID is required")
        vc = req.volume_capability
        if vc is None:
            raise invalid_argument("volume capability is required")
        if vc.access_mode is None:
            raise invalid_argument("access mode is required")
        mode = vc.access_mode.mode
        if mode == AccessModeType.UNKNOWN:
            raise invalid_argument(ERR_UNKNOWN_ACCESS_MODE)

        client = self._client()
        sdc_id = self._get_sdc_id(client, node_id)
        vol = self._get_volume(client, vol_id, "before controller publish")

        if vol.mapped_sdc_info:
            if vol.is_mapped_to(sdc_id):
                # compatibility with the existing mapping is not re-checked
                logger.debug(f"Volume {vol_id} already mapped to SDC {sdc_id}")
                return ControllerPublishVolumeResponse()

            if mode in SINGLE_NODE_MODES:
                raise failed_precondition(
                    f"volume already published to SDC id: {vol.mapped_sdc_info[0].sdc_id}"
                )

            if not vol.mapping_to_all_sdcs_enabled:
                raise failed_precondition(ERR_NO_MULTI_MAP)

            validate_access_type(mode, access_type_is_block([vc]))

        logger.info(f"Mapping volume {vol_id} to SDC {sdc_id} (node={node_id}, mode={mode.value})")
        try:
            client.map_volume_to_sdc(vol_id, sdc_id, allow_multiple=False)
        except GatewayError as e:
            logger.error(f"Mapping volume {vol_id} to SDC {sdc_id} failed: {e}")
            raise internal(f"error mapping volume to node: {e}") from e

        return ControllerPublishVolumeResponse()

    def controller_unpublish_volume(self, req: ControllerUnpublishVolumeRequest) -> ControllerUnpublishVolumeResponse:
        vol_id = req.volume_id
        if not vol_id:
            raise invalid_argument("volumeID is required")
        node_id = req.node_id
        if not node_id:
            raise invalid_argument("Node ID is required")

        client = self._client()
        sdc_id = self._get_sdc_id(client, node_id)
        vol = self._get_volume(client, vol_id, "before controller unpublish")

        if not vol.is_mapped_to(sdc_id):
            logger.debug(f"Volume {vol_id} already unpublished from SDC {sdc_id}")
            return ControllerUnpublishVolumeResponse()

        logger.info(f"Unmapping volume {vol_id} from SDC {sdc_id} (node={node_id})")
        try:
            client.unmap_volume_from_sdc(vol_id, sdc_id, ignore_scsi_initiators=True)
        except GatewayError as e:
            logger.error(f"Unmapping volume {vol_id} from SDC {sdc_id} failed: {e}")
            raise internal(f"error unmapping volume from node: {e}") from e

        return ControllerUnpublishVolumeResponse()

    # ========================================================================
    # CAPABILITY VALIDATION
    # ========================================================================

    def validate_volume_capabilities(
        self, req: ValidateVolumeCapabilitiesRequest
    ) -> ValidateVolumeCapabilitiesResponse:
        vol_id = req.volume_id
        if not vol_id:
            raise invalid_argument("volumeID is required")
        if not req.volume_capabilities:
            raise invalid_argument("volume capabilities are required")

        client = self._client()
        vol = self._get_volume(client, vol_id, "for capabilities")

        supported, reason = validate_volume_capabilities(req.volume_capabilities, vol)
        resp = ValidateVolumeCapabilitiesResponse(supported=supported)
        if not supported:
            resp.message = reason
        return resp

    # ========================================================================
    # LISTING
    # ========================================================================

    def _fetch_all_volumes(self, client: GatewayClient) -> List[Volume]:
        try:
            return client.list_volumes()
        except GatewayError as e:
            raise internal(f"unable to list volumes: {e}") from e

    def list_volumes(self, req: ListVolumesRequest) -> ListVolumesResponse:
        """
        Page through all volumes.

        The starting token is an offset into the enumeration. When a page is
        smaller than the full listing, the listing is cached and later pages
        are served from that cache until a create/delete clears it.
        """
        start_token = 0
        if req.starting_token:
            if not _TOKEN_RE.fullmatch(req.starting_token):
                raise ControllerError(
                    StatusCode.ABORTED,
                    f"unable to parse startingToken:{req.starting_token} into uint32",
                )
            start_token = int(req.starting_token)
            if start_token > _MAX_TOKEN:
                raise ControllerError(
                    StatusCode.ABORTED,
                    f"startingToken:{req.starting_token} out of range",
                )

        max_entries = req.max_entries
        if max_entries < 0:
            raise invalid_argument("max_entries cannot be negative")

        client = self._client()

        source: Sequence[Volume] = ()
        if start_token > 0:
            source = self.vol_cache.snapshot()

        if start_token == 0 or not source:
            # The cache may have been cleared by a create/delete since the
            # caller's first page; the token then indexes a fresh listing.
            source = self._fetch_all_volumes(client)
            if 0 < max_entries < len(source):
                self.vol_cache.store(source)

        total = len(source)
        if start_token > total:
            raise ControllerError(
                StatusCode.ABORTED,
                f"startingToken={start_token} > len(vols)={total}",
            )

        remaining = total - start_token
        count = max_entries if 0 < max_entries < remaining else remaining

        page = source[start_token:start_token + count]
        entries = [ListVolumesEntry(volume=to_volume_info(vol)) for vol in page]

        next_token = ""
        if start_token + len(entries) < total:
            next_token = str(start_token + len(entries))

        return ListVolumesResponse(entries=entries, next_token=next_token)

    # ========================================================================
    # CAPACITY & CAPABILITIES
    # ========================================================================

    def get_capacity(self, req: GetCapacityRequest) -> GetCapacityResponse:
        client = self._client()

        pool_name = req.parameters.get(KEY_STORAGE_POOL)
        try:
            if pool_name:
                pool_id = self._storage_pool_id(client, pool_name)
                stats = client.get_pool_statistics(pool_id)
            else:
                stats = client.get_system_statistics(self.session.system.id)
        except GatewayError as e:
            raise internal(f"unable to get system stats: {e}") from e

        available = stats.capacity_available_for_volume_allocation_in_kb * BYTES_IN_KIB
        return GetCapacityResponse(available_capacity=available)

    def controller_get_capabilities(self) -> ControllerGetCapabilitiesResponse:
        return ControllerGetCapabilitiesResponse(capabilities=list(ADVERTISED_CAPABILITIES))

    # ========================================================================
    # SNAPSHOTS
    # ========================================================================

    def create_snapshot(self) -> None:
        raise ControllerError(StatusCode.UNIMPLEMENTED, "")

    def delete_snapshot(self) -> None:
        raise ControllerError(StatusCode.UNIMPLEMENTED, "")

    def list_snapshots(self) -> None:
        raise ControllerError(StatusCode.UNIMPLEMENTED, "")
