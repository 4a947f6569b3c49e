"""
PowerFlex gateway client package.

REST access to the PowerFlex (ScaleIO) gateway: volumes, storage pools,
SDC hosts, systems and capacity statistics.
"""

from gateway.client import GatewayClient
from gateway.errors import (
    GatewayError,
    GatewayNotFoundError,
    GatewayAlreadyExistsError,
    GatewayAuthenticationError,
)
from gateway.models import (
    MappedSdcInfo,
    Sdc,
    Statistics,
    StoragePool,
    System,
    Volume,
)

__all__ = [
    "GatewayClient",
    "GatewayError",
    "GatewayNotFoundError",
    "GatewayAlreadyExistsError",
    "GatewayAuthenticationError",
    "MappedSdcInfo",
    "Sdc",
    "Statistics",
    "StoragePool",
    "System",
    "Volume",
]
