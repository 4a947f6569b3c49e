"""
PowerFlex CSI controller.

Provisions, attaches, detaches, lists and sizes PowerFlex volumes for a
container orchestrator.
"""

from controller.config import ControllerOptions
from controller.errors import ControllerError, StatusCode
from controller.services.controller_service import ControllerService

__all__ = ["ControllerOptions", "ControllerError", "StatusCode", "ControllerService"]
