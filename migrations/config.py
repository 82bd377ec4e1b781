#!/usr/bin/env python3
"""
Network context for migrations

All settings come from environment variables (optionally loaded from a .env
file by the runner). The resulting NetworkContext is immutable and handed to
the deployer explicitly.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigurationError

DEFAULT_NETWORK = "development"
DEFAULT_RPC_URL = "http://localhost:8545"
DEFAULT_GAS_MULTIPLIER = 1.2
DEFAULT_RECEIPT_TIMEOUT = 300
DEFAULT_RECORDS_DIR = "deployments"


def _env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw, 0)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class NetworkContext:
    """Target network plus everything needed to sign and send deployments"""
    network: str = DEFAULT_NETWORK
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: Optional[int] = None
    private_key: Optional[str] = field(default=None, repr=False)
    gas_limit: Optional[int] = None
    gas_multiplier: float = DEFAULT_GAS_MULTIPLIER
    gas_price_wei: Optional[int] = None
    receipt_timeout: int = DEFAULT_RECEIPT_TIMEOUT
    slack_webhook: Optional[str] = field(default=None, repr=False)
    records_dir: str = DEFAULT_RECORDS_DIR

    @classmethod
    def from_env(cls, network: Optional[str] = None, records_dir: Optional[str] = None) -> "NetworkContext":
        """
        Build a context from the process environment

        Args:
            network: Network name; falls back to $NETWORK, then "development"
            records_dir: Where deployment records are written; falls back to "deployments"

        The RPC URL is looked up as <NETWORK>_RPC_URL first (e.g. SEPOLIA_RPC_URL),
        then RPC_URL.
        """
        network = network or os.getenv("NETWORK") or DEFAULT_NETWORK
        network_key = network.upper().replace("-", "_")
        rpc_url = os.getenv(f"{network_key}_RPC_URL") or os.getenv("RPC_URL") or DEFAULT_RPC_URL

        receipt_timeout = _env_int("RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT)
        gas_multiplier = _env_float("GAS_MULTIPLIER", DEFAULT_GAS_MULTIPLIER)
        if gas_multiplier < 1.0:
            raise ConfigurationError(f"GAS_MULTIPLIER must be at least 1.0, got {gas_multiplier}")

        return cls(
            network=network,
            rpc_url=rpc_url,
            chain_id=_env_int("CHAIN_ID"),
            private_key=os.getenv("PRIVATE_KEY") or None,
            gas_limit=_env_int("GAS_LIMIT"),
            gas_multiplier=gas_multiplier,
            gas_price_wei=_env_int("GAS_PRICE_WEI"),
            receipt_timeout=receipt_timeout if receipt_timeout is not None else DEFAULT_RECEIPT_TIMEOUT,
            slack_webhook=os.getenv("SLACK_WEBHOOK") or None,
            records_dir=records_dir or DEFAULT_RECORDS_DIR,
        )
