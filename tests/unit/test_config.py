"""
Unit tests for connection configuration.

Tests IBConfig validation and factory methods.
"""

from __future__ import annotations

import os
from unittest import mock

import pytest

from ibwire.config import IBConfig, IBPort


class TestIBPort:
    """Tests for IBPort enum."""

    def test_port_values(self) -> None:
        """Port enum has correct values."""
        assert IBPort.TWS_LIVE == 7496
        assert IBPort.TWS_PAPER == 7497
        assert IBPort.GATEWAY_LIVE == 4001
        assert IBPort.GATEWAY_PAPER == 4002


class TestIBConfig:
    """Tests for IBConfig."""

    def test_default_config(self) -> None:
        """Default config targets paper TWS on localhost."""
        config = IBConfig()
        assert config.host == "127.0.0.1"
        assert config.port == IBPort.TWS_PAPER
        assert config.client_id == 1
        assert config.timeout == 30.0
        assert config.optional_capabilities == ""
        assert config.is_paper is True
        assert config.is_gateway is False

    def test_paper_factory(self) -> None:
        config = IBConfig.paper(client_id=5)
        assert config.port == IBPort.TWS_PAPER
        assert config.client_id == 5

    def test_live_factory(self) -> None:
        config = IBConfig.live()
        assert config.port == IBPort.TWS_LIVE
        assert config.is_paper is False

    def test_gateway_factories(self) -> None:
        assert IBConfig.gateway_paper().port == IBPort.GATEWAY_PAPER
        assert IBConfig.gateway_paper().is_gateway is True
        assert IBConfig.gateway_live().port == IBPort.GATEWAY_LIVE
        assert IBConfig.gateway_live().is_paper is False

    def test_client_id_zero_allowed(self) -> None:
        assert IBConfig(client_id=0).client_id == 0

    def test_nonstandard_port_warns(self) -> None:
        with pytest.warns(UserWarning, match="Non-standard port"):
            config = IBConfig(port=12345)
        assert config.port == 12345

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"client_id": -1},
            {"timeout": 0},
            {"max_cancelled_ids": 0},
        ],
    )
    def test_invalid_values(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValueError):
            IBConfig(**kwargs)

    def test_port_out_of_range(self) -> None:
        with pytest.warns(UserWarning), pytest.raises(ValueError):
            IBConfig(port=70000)


class TestFromEnv:
    """Tests for environment-based configuration."""

    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            config = IBConfig.from_env()
        assert config.port == IBPort.TWS_PAPER
        assert config.client_id == 1

    def test_live_default_port(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            config = IBConfig.from_env(paper=False)
        assert config.port == IBPort.TWS_LIVE

    def test_overrides(self) -> None:
        env = {
            "IBKR_HOST": "10.0.0.5",
            "IBKR_PORT": "4002",
            "IBKR_CLIENT_ID": "9",
            "IBKR_TIMEOUT": "5",
            "IBKR_OPTIONAL_CAPABILITIES": "+PACEAPI",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = IBConfig.from_env()
        assert config.host == "10.0.0.5"
        assert config.port == 4002
        assert config.client_id == 9
        assert config.timeout == 5.0
        assert config.optional_capabilities == "+PACEAPI"
