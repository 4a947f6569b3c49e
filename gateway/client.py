"""
PowerFlex Gateway REST Client

Thin requests-based client for the PowerFlex (ScaleIO) gateway REST API.

Session lifecycle:
1. GET /api/login with the admin user/password (basic auth) returns a token
2. Every later call authenticates with basic auth ("", token)
3. A 401 on a later call logs in again and replays the request once;
   a second 401 raises GatewayAuthenticationError

Gateway failures are JSON bodies of the form
{"message": str, "httpStatusCode": int, "errorCode": int}. They are turned
into typed exceptions here (see gateway.errors) so nothing above this module
inspects error text.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from gateway.errors import (
    GatewayAlreadyExistsError,
    GatewayAuthenticationError,
    GatewayError,
    GatewayNotFoundError,
)
from gateway.models import Sdc, Statistics, StoragePool, System, Volume

logger = logging.getLogger(__name__)

REMOVE_MODE_ONLY_ME = "ONLY_ME"

THIN_PROVISIONED = "ThinProvisioned"
THICK_PROVISIONED = "ThickProvisioned"

# Gateway messages that identify a specific outcome
_MSG_NOT_FOUND = "not found"
_MSG_VOLUME_NOT_FOUND = "could not find the volume"
_MSG_NAME_IN_USE = "volume name already in use"

# Gateway error codes for the same outcomes
_ERR_CODE_NAME_IN_USE = 6
_ERR_CODE_VOLUME_NOT_FOUND = 79


def _flag(value: bool) -> str:
    return "TRUE" if value else "FALSE"


class GatewayClient:
    """
    Client for the PowerFlex gateway.

    Usage:
        client = GatewayClient("https://gw.example.com", "admin", "secret")
        client.authenticate()
        system = client.find_system("cluster-a")
        pool = client.find_storage_pool("pool-1")
        vol_id = client.create_volume("vol-1", 8 * 1024 * 1024, pool.id)
    """

    def __init__(
        self,
        endpoint: str,
        username: str,
        password: str,
        insecure: bool = False,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize gateway client.

        Args:
            endpoint: Gateway base URL (e.g., 'https://10.0.0.5')
            username: Gateway admin user
            password: Gateway admin password
            insecure: Skip TLS certificate verification
            timeout: Per-request timeout in seconds
            session: Optional pre-built requests session
        """
        self.endpoint = endpoint.rstrip("/")
        self.username = username
        self.password = password
        self.insecure = insecure
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = not insecure
        self.session.headers.update({"Accept": "application/json"})
        self._token: str = ""

    # ========================================================================
    # SESSION
    # ========================================================================

    def get_token(self) -> str:
        return self._token

    def authenticate(self) -> str:
        """Log in to the gateway and keep the returned session token."""
        url = f"{self.endpoint}/api/login"
        try:
            response = self.session.get(url, auth=(self.username, self.password), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise GatewayError(f"unable to reach gateway {self.endpoint}: {e}") from e

        if response.status_code == 401:
            raise GatewayAuthenticationError("gateway rejected credentials", status_code=401)
        if response.status_code != 200:
            raise self._error_from_response(response)

        self._token = str(response.json()).strip('"')
        logger.info(f"Authenticated to PowerFlex gateway {self.endpoint}")
        return self._token

    # ========================================================================
    # LOW-LEVEL REQUESTS
    # ========================================================================

    def _send(self, method: str, path: str, body: Optional[Dict[str, Any]]) -> requests.Response:
        url = f"{self.endpoint}{path}"
        try:
            return self.session.request(
                method,
                url,
                json=body,
                auth=("", self._token),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise GatewayError(f"gateway request timed out: {method} {path}") from e
        except requests.exceptions.RequestException as e:
            raise GatewayError(f"gateway request failed: {method} {path}: {e}") from e

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        response = self._send(method, path, body)

        if response.status_code == 401:
            # token expired on the gateway side
            logger.info(f"Gateway session expired, logging in again ({method} {path})")
            self._token = ""
            self.authenticate()
            response = self._send(method, path, body)

        if response.status_code == 401:
            raise GatewayAuthenticationError("gateway session is not authenticated", status_code=401)
        if response.status_code >= 300:
            raise self._error_from_response(response)

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_from_response(response: requests.Response) -> GatewayError:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        message = str(payload.get("message") or response.text or f"HTTP {response.status_code}")
        error_code = payload.get("errorCode")
        status_code = payload.get("httpStatusCode") or response.status_code
        lowered = message.lower()

        if error_code == _ERR_CODE_NAME_IN_USE or lowered.startswith(_MSG_NAME_IN_USE):
            return GatewayAlreadyExistsError(message, status_code, error_code)
        if (
            error_code == _ERR_CODE_VOLUME_NOT_FOUND
            or response.status_code == 404
            or lowered.startswith(_MSG_VOLUME_NOT_FOUND)
            or lowered == _MSG_NOT_FOUND
        ):
            return GatewayNotFoundError(message, status_code, error_code)
        return GatewayError(message, status_code, error_code)

    # ========================================================================
    # SYSTEMS, POOLS, SDCS
    # ========================================================================

    def find_system(self, name: str) -> System:
        systems = self._request("GET", "/api/types/System/instances") or []
        for raw in systems:
            system = System.model_validate(raw)
            if system.name == name or system.id == name:
                return system
        raise GatewayNotFoundError(f"system '{name}' not found")

    def find_storage_pool(self, name: str) -> StoragePool:
        pools = self._request("GET", "/api/types/StoragePool/instances") or []
        for raw in pools:
            pool = StoragePool.model_validate(raw)
            if pool.name == name:
                return pool
        raise GatewayNotFoundError(f"storage pool '{name}' not found")

    def find_sdc_id(self, node_id: str) -> str:
        """
        Resolve a node id to the id of its SDC.

        The node plugin publishes the SDC GUID as its node id; an SDC id is
        accepted as well.
        """
        sdcs = self._request("GET", "/api/types/Sdc/instances") or []
        for raw in sdcs:
            sdc = Sdc.model_validate(raw)
            if sdc.sdc_guid.lower() == node_id.lower() or sdc.id == node_id:
                return sdc.id
        raise GatewayNotFoundError(f"no SDC found for node '{node_id}'")

    def get_system_statistics(self, system_id: str) -> Statistics:
        raw = self._request("GET", f"/api/instances/System::{system_id}/relationships/Statistics")
        return Statistics.model_validate(raw or {})

    def get_pool_statistics(self, pool_id: str) -> Statistics:
        raw = self._request("GET", f"/api/instances/StoragePool::{pool_id}/relationships/Statistics")
        return Statistics.model_validate(raw or {})

    # ========================================================================
    # VOLUMES
    # ========================================================================

    def create_volume(
        self,
        name: str,
        size_kib: int,
        pool_id: str,
        volume_type: str = THIN_PROVISIONED,
    ) -> str:
        """Create a volume and return its id. Raises GatewayAlreadyExistsError on a name clash."""
        body = {
            "name": name,
            "volumeSizeInKb": str(size_kib),
            "storagePoolId": pool_id,
            "volumeType": volume_type,
        }
        resp = self._request("POST", "/api/types/Volume/instances", body)
        return str(resp["id"])

    def find_volume_id(self, name: str) -> str:
        resp = self._request("POST", "/api/types/Volume/instances/action/queryIdByKey", {"name": name})
        if not resp:
            raise GatewayNotFoundError(f"volume '{name}' not found")
        return str(resp).strip('"')

    def get_volume(self, volume_id: str) -> Volume:
        raw = self._request("GET", f"/api/instances/Volume::{volume_id}")
        return Volume.model_validate(raw)

    def list_volumes(self) -> List[Volume]:
        volumes = self._request("GET", "/api/types/Volume/instances") or []
        return [Volume.model_validate(raw) for raw in volumes]

    def remove_volume(self, volume_id: str, mode: str = REMOVE_MODE_ONLY_ME) -> None:
        self._request(
            "POST",
            f"/api/instances/Volume::{volume_id}/action/removeVolume",
            {"removeMode": mode},
        )

    def map_volume_to_sdc(self, volume_id: str, sdc_id: str, allow_multiple: bool = False) -> None:
        self._request(
            "POST",
            f"/api/instances/Volume::{volume_id}/action/addMappedSdc",
            {"sdcId": sdc_id, "allowMultipleMappings": _flag(allow_multiple)},
        )

    def unmap_volume_from_sdc(self, volume_id: str, sdc_id: str, ignore_scsi_initiators: bool = True) -> None:
        self._request(
            "POST",
            f"/api/instances/Volume::{volume_id}/action/removeMappedSdc",
            {"sdcId": sdc_id, "ignoreScsiInitiators": _flag(ignore_scsi_initiators)},
        )
