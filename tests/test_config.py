"""
Tests for environment configuration and logging setup.
"""

import logging

import pytest

from controller.config import ControllerOptions, validate_bind_address, validate_endpoint
from shared.logging_config import parse_level, setup_logging


class TestControllerOptions:

    def test_defaults(self, monkeypatch):
        for name in (
            "POWERFLEX_GATEWAY_ENDPOINT",
            "POWERFLEX_GATEWAY_USER",
            "POWERFLEX_GATEWAY_PASSWORD",
            "POWERFLEX_SYSTEM_NAME",
            "POWERFLEX_GATEWAY_INSECURE",
            "POWERFLEX_AUTOPROBE",
            "POWERFLEX_THICK_PROVISIONING",
            "POWERFLEX_GATEWAY_TIMEOUT",
        ):
            monkeypatch.delenv(name, raising=False)

        opts = ControllerOptions.from_env()
        assert opts.endpoint == ""
        assert opts.insecure is False
        assert opts.auto_probe is True
        assert opts.thick_provisioning is False
        assert opts.request_timeout == 30.0

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("POWERFLEX_GATEWAY_ENDPOINT", " https://gw.test ")
        monkeypatch.setenv("POWERFLEX_GATEWAY_USER", "admin")
        monkeypatch.setenv("POWERFLEX_GATEWAY_PASSWORD", "secret")
        monkeypatch.setenv("POWERFLEX_SYSTEM_NAME", "cluster-a")
        monkeypatch.setenv("POWERFLEX_GATEWAY_INSECURE", "yes")
        monkeypatch.setenv("POWERFLEX_AUTOPROBE", "false")
        monkeypatch.setenv("POWERFLEX_THICK_PROVISIONING", "1")
        monkeypatch.setenv("POWERFLEX_GATEWAY_TIMEOUT", "7.5")

        opts = ControllerOptions.from_env()
        assert opts.endpoint == "https://gw.test"
        assert opts.user == "admin"
        assert opts.system_name == "cluster-a"
        assert opts.insecure is True
        assert opts.auto_probe is False
        assert opts.thick_provisioning is True
        assert opts.request_timeout == 7.5

    def test_bad_timeout_falls_back(self, monkeypatch):
        monkeypatch.setenv("POWERFLEX_GATEWAY_TIMEOUT", "soon")
        assert ControllerOptions.from_env().request_timeout == 30.0


class TestValidation:

    def test_bind_address(self):
        validate_bind_address("0.0.0.0", 8004)
        with pytest.raises(ValueError):
            validate_bind_address("", 8004)
        with pytest.raises(ValueError):
            validate_bind_address("0.0.0.0", 70000)

    @pytest.mark.parametrize("endpoint", ["https://10.0.0.5", "http://gw.local:8080"])
    def test_valid_endpoint(self, endpoint):
        validate_endpoint(endpoint)

    @pytest.mark.parametrize("endpoint", ["", "10.0.0.5", "ftp://gw.local"])
    def test_invalid_endpoint(self, endpoint):
        with pytest.raises(ValueError):
            validate_endpoint(endpoint)


class TestLogging:

    def test_parse_level(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level("WARNING") == logging.WARNING
        assert parse_level("chatty") == logging.INFO
        assert parse_level("", logging.ERROR) == logging.ERROR

    def test_setup_logging_writes_file(self, tmp_path):
        log_file = tmp_path / "logs" / "controller.log"
        logger = setup_logging("controller", level=logging.DEBUG, log_file=str(log_file))

        logger.info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logger.name == "controller"
        content = log_file.read_text()
        assert "[CONTROLLER]" in content
        assert "hello" in content
        assert logging.getLogger("urllib3").level == logging.INFO

        for handler in list(logging.getLogger().handlers):
            if isinstance(handler, logging.FileHandler):
                logging.getLogger().removeHandler(handler)
                handler.close()
