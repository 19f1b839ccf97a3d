"""
Client configuration
"""

import os
from dataclasses import dataclass

DEFAULT_RPC_URL = "http://localhost:7077/rpc"
DEFAULT_NEXUS = "simnet"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONFIRMATION_DELAY = 10.0


@dataclass
class ClientConfig:
    """Connection settings shared by the client and the transaction workflow"""
    rpc_url: str = DEFAULT_RPC_URL
    timeout: float = DEFAULT_TIMEOUT
    nexus: str = DEFAULT_NEXUS
    confirmation_delay: float = DEFAULT_CONFIRMATION_DELAY

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Build a config from environment variables, falling back to defaults.

        Reads PHANTASMA_RPC_URL, PHANTASMA_TIMEOUT, PHANTASMA_NEXUS and
        PHANTASMA_CONFIRMATION_DELAY.
        """
        return cls(
            rpc_url=os.environ.get("PHANTASMA_RPC_URL", DEFAULT_RPC_URL),
            timeout=float(os.environ.get("PHANTASMA_TIMEOUT", str(DEFAULT_TIMEOUT))),
            nexus=os.environ.get("PHANTASMA_NEXUS", DEFAULT_NEXUS),
            confirmation_delay=float(
                os.environ.get("PHANTASMA_CONFIRMATION_DELAY", str(DEFAULT_CONFIRMATION_DELAY))
            ),
        )
