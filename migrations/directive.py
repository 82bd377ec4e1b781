#!/usr/bin/env python3
"""
Initial migration

Deploys the token, its fuzzing variant and the two test helpers, in that
order. No addresses are passed between deployments; the order only fixes
the nonce sequence.
"""

import logging
from typing import Any, Sequence

from .contracts import ContractKind

logger = logging.getLogger(__name__)

DEPLOYMENT_ORDER = (
    ContractKind.PRIMARY_TOKEN,
    ContractKind.PRIMARY_TOKEN_FUZZING,
    ContractKind.TEST_FLASH_LENDER,
    ContractKind.TEST_TRANSFER_RECEIVER,
)


class DeploymentDirective:
    """Issues the initial migration's deployments against a deployer"""

    def __init__(self, deployer: Any):
        self.deployer = deployer

    def run(self, network: str, accounts: Sequence[str]) -> None:
        # network and accounts are informational; the deployer was built with its own context
        logger.info(f"Running initial migration on {network} ({len(accounts)} accounts available)")
        for kind in DEPLOYMENT_ORDER:
            logger.info(f"Deploying {kind.contract_name}...")
            self.deployer.deploy(kind)
