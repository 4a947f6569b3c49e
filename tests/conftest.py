"""
Pytest configuration and fixtures for the CSI controller tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from controller.config import ControllerOptions
from controller.services.controller_service import ControllerService
from tests.fake_gateway import FakeGateway

GIB = 1024 * 1024 * 1024
KIB_IN_GIB = 1024 * 1024


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "api: API endpoint tests"
    )


@pytest.fixture
def options() -> ControllerOptions:
    return ControllerOptions(
        endpoint="https://gateway.test",
        user="admin",
        password="secret",
        system_name="cluster-a",
    )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def controller(options, gateway) -> ControllerService:
    return ControllerService(options, client_factory=lambda opts: gateway)
