"""
CSI Controller Service Launcher

Starts the PowerFlex CSI controller service from the controller/ package.

This service provides:
- CreateVolume / DeleteVolume
- ControllerPublishVolume / ControllerUnpublishVolume (SDC mapping)
- ValidateVolumeCapabilities
- ListVolumes (paginated, cached)
- GetCapacity / ControllerGetCapabilities

Usage:
    python scripts/run_controller_service.py --host 0.0.0.0 --port 8004

Environment Variables:
    POWERFLEX_CSI_BIND_HOST: Bind address (default: 0.0.0.0)
    POWERFLEX_CSI_PORT: Controller API port (default: 8004)
    POWERFLEX_GATEWAY_ENDPOINT: Gateway URL (e.g., https://10.0.0.5)
    POWERFLEX_GATEWAY_USER / POWERFLEX_GATEWAY_PASSWORD: Gateway credentials
    POWERFLEX_SYSTEM_NAME: PowerFlex system to manage
    POWERFLEX_GATEWAY_INSECURE: Skip TLS verification (default: false)
    POWERFLEX_AUTOPROBE: Probe the gateway on first call (default: true)
    POWERFLEX_THICK_PROVISIONING: Default to thick volumes (default: false)
    POWERFLEX_GATEWAY_TIMEOUT: Gateway request timeout in seconds (default: 30)
    POWERFLEX_LOG_LEVEL: Log level (default: INFO)
"""
import argparse
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from controller.config import CSI_BIND_HOST, CSI_PORT, validate_bind_address
from shared.logging_config import parse_level, setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Run PowerFlex CSI controller service")
    parser.add_argument("--host", default=CSI_BIND_HOST)
    parser.add_argument("--port", type=int, default=CSI_PORT)
    parser.add_argument("--log-level", default=os.getenv("POWERFLEX_LOG_LEVEL", "INFO"))
    parser.add_argument("--log-file", default=os.getenv("POWERFLEX_LOG_FILE"))
    args = parser.parse_args()

    validate_bind_address(args.host, args.port)
    logger = setup_logging("controller", level=parse_level(args.log_level), log_file=args.log_file)

    logger.info(f"API Address: {args.host}:{args.port}")
    logger.info(f"Gateway: {os.getenv('POWERFLEX_GATEWAY_ENDPOINT', '') or '<unset>'}")

    uvicorn.run("controller.service:app", host=args.host, port=args.port, reload=False, log_config=None)


if __name__ == "__main__":
    main()
