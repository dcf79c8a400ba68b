"""
Connection configuration.

Handles TWS/IB Gateway connection settings.
Supports paper and live trading modes via port selection.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass
from enum import Enum


class IBPort(int, Enum):
    """Standard API ports."""

    TWS_LIVE = 7496
    TWS_PAPER = 7497
    GATEWAY_LIVE = 4001
    GATEWAY_PAPER = 4002


@dataclass
class IBConfig:
    """
    Gateway connection configuration.

    Attributes:
        host: TWS/IB Gateway host (default: localhost)
        port: API port - determines paper vs live trading
        client_id: Client id sent in the start-API message (0 is the master client)
        timeout: Bound on connect plus handshake, in seconds
        optional_capabilities: Free-form capabilities string sent with start-API
        connect_options: Extra options appended to the handshake version range
        max_cancelled_ids: How many cancelled request ids are remembered

    Port Reference:
        7496 - TWS Live
        7497 - TWS Paper (default)
        4001 - IB Gateway Live
        4002 - IB Gateway Paper

    Example:
        # Paper trading with TWS
        config = IBConfig(port=IBPort.TWS_PAPER)

        # Live trading with IB Gateway
        config = IBConfig.gateway_live(client_id=7)
    """

    host: str = "127.0.0.1"
    port: int = IBPort.TWS_PAPER
    client_id: int = 1
    timeout: float = 30.0
    optional_capabilities: str = ""
    connect_options: str = ""
    max_cancelled_ids: int = 10_000

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_ports = {p.value for p in IBPort}
        if self.port not in valid_ports:
            warnings.warn(
                f"Non-standard port {self.port}. "
                f"Standard ports: {', '.join(f'{p.name}={p.value}' for p in IBPort)}",
                UserWarning,
                stacklevel=2,
            )

        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range: {self.port}")
        if self.client_id < 0:
            raise ValueError("client_id must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_cancelled_ids <= 0:
            raise ValueError("max_cancelled_ids must be positive")

    @property
    def is_paper(self) -> bool:
        """Check if configured for paper trading."""
        return self.port in (IBPort.TWS_PAPER, IBPort.GATEWAY_PAPER)

    @property
    def is_gateway(self) -> bool:
        """Check if using IB Gateway (vs TWS)."""
        return self.port in (IBPort.GATEWAY_LIVE, IBPort.GATEWAY_PAPER)

    @classmethod
    def from_env(cls, paper: bool = True) -> IBConfig:
        """
        Create config from environment variables.

        Environment Variables:
            IBKR_HOST: TWS/Gateway host (default: 127.0.0.1)
            IBKR_PORT: API port (default: 7497 for paper, 7496 for live)
            IBKR_CLIENT_ID: Client ID (default: 1)
            IBKR_TIMEOUT: Handshake timeout in seconds (default: 30)
            IBKR_OPTIONAL_CAPABILITIES: Capabilities string (default: empty)

        Args:
            paper: Use paper trading port (default: True)

        Returns:
            IBConfig instance
        """
        host = os.environ.get("IBKR_HOST", "127.0.0.1")

        port_env = os.environ.get("IBKR_PORT")
        if port_env:
            port = int(port_env)
        else:
            port = IBPort.TWS_PAPER if paper else IBPort.TWS_LIVE

        return cls(
            host=host,
            port=port,
            client_id=int(os.environ.get("IBKR_CLIENT_ID", "1")),
            timeout=float(os.environ.get("IBKR_TIMEOUT", "30")),
            optional_capabilities=os.environ.get("IBKR_OPTIONAL_CAPABILITIES", ""),
        )

    @classmethod
    def paper(cls, **kwargs) -> IBConfig:
        """Create paper trading config (convenience method)."""
        return cls(port=IBPort.TWS_PAPER, **kwargs)

    @classmethod
    def live(cls, **kwargs) -> IBConfig:
        """Create live trading config (convenience method)."""
        return cls(port=IBPort.TWS_LIVE, **kwargs)

    @classmethod
    def gateway_paper(cls, **kwargs) -> IBConfig:
        """Create IB Gateway paper config (for servers)."""
        return cls(port=IBPort.GATEWAY_PAPER, **kwargs)

    @classmethod
    def gateway_live(cls, **kwargs) -> IBConfig:
        """Create IB Gateway live config (for servers)."""
        return cls(port=IBPort.GATEWAY_LIVE, **kwargs)
