from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

# Parameter key naming the storage pool in CreateVolume / GetCapacity
KEY_STORAGE_POOL = "storagepool"

# Parameter key overriding the thin/thick provisioning default in CreateVolume
KEY_THICK_PROVISIONING = "thickprovisioning"


def _int_env(name: str, default: int) -> int:
    raw = str(os.getenv(name, str(default))).strip()
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = str(os.getenv(name, str(default))).strip()
    try:
        return float(raw)
    except Exception:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


CSI_BIND_HOST = str(os.getenv("POWERFLEX_CSI_BIND_HOST", "0.0.0.0")).strip()
CSI_PORT = _int_env("POWERFLEX_CSI_PORT", 8004)


@dataclass
class ControllerOptions:
    endpoint: str = ""
    user: str = ""
    password: str = ""
    system_name: str = ""
    insecure: bool = False
    auto_probe: bool = True
    thick_provisioning: bool = False
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "ControllerOptions":
        return cls(
            endpoint=str(os.getenv("POWERFLEX_GATEWAY_ENDPOINT", "")).strip(),
            user=str(os.getenv("POWERFLEX_GATEWAY_USER", "")).strip(),
            password=str(os.getenv("POWERFLEX_GATEWAY_PASSWORD", "")),
            system_name=str(os.getenv("POWERFLEX_SYSTEM_NAME", "")).strip(),
            insecure=_bool_env("POWERFLEX_GATEWAY_INSECURE", False),
            auto_probe=_bool_env("POWERFLEX_AUTOPROBE", True),
            thick_provisioning=_bool_env("POWERFLEX_THICK_PROVISIONING", False),
            request_timeout=_float_env("POWERFLEX_GATEWAY_TIMEOUT", 30.0),
        )


def validate_bind_address(host: str, port: int) -> None:
    if not str(host or "").strip():
        raise ValueError("host is required")
    if int(port) < 1 or int(port) > 65535:
        raise ValueError("port must be in range 1..65535")


def validate_endpoint(endpoint: str) -> None:
    parsed = urlparse(str(endpoint or "").strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("gateway endpoint must be a valid http(s) URL")
