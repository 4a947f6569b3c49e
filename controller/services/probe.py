"""
Gateway session probe.

Makes sure a logged-in gateway client and the configured PowerFlex system
are available before any privileged controller call.

States: UNPROBED -> PROBING -> READY
                            -> FAILED(reason) -> PROBING (next attempt)

Only one thread probes at a time; concurrent callers wait for that attempt
and share its outcome.
"""

import enum
import logging
import threading
from typing import Callable, Optional

from controller.config import ControllerOptions, validate_endpoint
from controller.errors import failed_precondition
from gateway.client import GatewayClient
from gateway.errors import GatewayError
from gateway.models import System

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ControllerOptions], GatewayClient]


class ProbeState(str, enum.Enum):
    UNPROBED = "UNPROBED"
    PROBING = "PROBING"
    READY = "READY"
    FAILED = "FAILED"


def default_client_factory(opts: ControllerOptions) -> GatewayClient:
    return GatewayClient(
        opts.endpoint,
        opts.user,
        opts.password,
        insecure=opts.insecure,
        timeout=opts.request_timeout,
    )


class SessionProbe:
    """Guarded entry point to the gateway session"""

    def __init__(self, opts: ControllerOptions, client_factory: Optional[ClientFactory] = None):
        self.opts = opts
        self.client_factory = client_factory or default_client_factory
        self.state = ProbeState.UNPROBED
        self.failure_reason = ""
        self.client: Optional[GatewayClient] = None
        self.system: Optional[System] = None
        self._lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self.state == ProbeState.READY

    def _check_options(self) -> None:
        if not self.opts.endpoint:
            raise failed_precondition("missing PowerFlex gateway endpoint")
        if not self.opts.user:
            raise failed_precondition("missing PowerFlex gateway user")
        if not self.opts.password:
            raise failed_precondition("missing PowerFlex gateway password")
        if not self.opts.system_name:
            raise failed_precondition("missing PowerFlex system name")
        try:
            validate_endpoint(self.opts.endpoint)
        except ValueError as e:
            raise failed_precondition(str(e)) from e

    def _connect(self) -> None:
        self._check_options()

        if self.client is None:
            self.client = self.client_factory(self.opts)

        if not self.client.get_token():
            try:
                self.client.authenticate()
            except GatewayError as e:
                raise failed_precondition(f"unable to login to PowerFlex gateway: {e}") from e

        if self.system is None:
            try:
                self.system = self.client.find_system(self.opts.system_name)
            except GatewayError as e:
                raise failed_precondition(f"unable to find matching PowerFlex system name: {e}") from e

    def probe(self) -> None:
        """Connect to the gateway now. Raises ControllerError(FAILED_PRECONDITION) on failure."""
        with self._lock:
            if self.state == ProbeState.READY:
                return
            self.state = ProbeState.PROBING
            try:
                self._connect()
            except Exception as e:
                self.state = ProbeState.FAILED
                self.failure_reason = str(e)
                logger.error(f"Controller probe failed: {e}")
                raise
            self.state = ProbeState.READY
            self.failure_reason = ""
            logger.info(f"Controller probe succeeded (system={self.system.name} id={self.system.id})")

    def require(self) -> GatewayClient:
        """Return a ready client, probing first if allowed."""
        if self.state != ProbeState.READY:
            if not self.opts.auto_probe:
                raise failed_precondition("Controller Service has not been probed")
            logger.debug("probing controller service automatically")
            try:
                self.probe()
            except Exception as e:
                raise failed_precondition(f"failed to probe/init plugin: {getattr(e, 'message', e)}") from e
        return self.client
