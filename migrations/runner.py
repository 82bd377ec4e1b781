#!/usr/bin/env python3
"""
Migration runner

Usage:
    wj-migrate [network] [--build-dir DIR ...] [--records-dir DIR] [--env-file PATH]

Connection and signing settings come from the environment (or .env):
RPC_URL / <NETWORK>_RPC_URL, CHAIN_ID, PRIVATE_KEY, GAS_LIMIT, GAS_MULTIPLIER,
GAS_PRICE_WEI, RECEIPT_TIMEOUT, SLACK_WEBHOOK.
"""

import argparse
import logging
import sys
from typing import Iterable, Optional

from dotenv import load_dotenv

from .alerts import send_alert
from .artifacts import DEFAULT_BUILD_DIRS, ArtifactStore
from .config import NetworkContext
from .deployer import Web3Deployer
from .directive import DeploymentDirective
from .errors import DeploymentError

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "migrations.log"


def configure_logging(log_file: str = DEFAULT_LOG_FILE, level: int = logging.INFO):
    """Configure logging"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Deploy the WJ contracts (initial migration).")
    p.add_argument(
        "network",
        nargs="?",
        default=None,
        help="Target network name (default: $NETWORK or 'development')",
    )
    p.add_argument(
        "--build-dir",
        action="append",
        dest="build_dirs",
        default=None,
        help=f"Artifact directory to search; repeatable (default: {', '.join(DEFAULT_BUILD_DIRS)})",
    )
    p.add_argument(
        "--records-dir",
        default=None,
        help="Directory for deployments/<network>.json records (default: deployments)",
    )
    p.add_argument(
        "--env-file",
        default=".env",
        help="Optional .env file with RPC_URL, PRIVATE_KEY, ...",
    )
    p.add_argument(
        "--log-file",
        default=DEFAULT_LOG_FILE,
        help=f"Log file (default: {DEFAULT_LOG_FILE})",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Run the initial migration; returns the process exit code"""
    args = parse_args(argv)
    load_dotenv(args.env_file)
    configure_logging(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    deployer: Optional[Web3Deployer] = None
    network = args.network or "unknown"
    webhook: Optional[str] = None
    try:
        context = NetworkContext.from_env(args.network, records_dir=args.records_dir)
        network = context.network
        webhook = context.slack_webhook

        store = ArtifactStore(args.build_dirs)
        deployer = Web3Deployer(context, store)
        deployer.connect()
        accounts = deployer.accounts()

        DeploymentDirective(deployer).run(context.network, accounts)

    except DeploymentError as e:
        deployed = deployer.deployed if deployer is not None else []
        logger.error(f"Migration failed on {network}: {e}")
        if deployed:
            logger.warning(f"{len(deployed)} contract(s) were deployed before the failure and remain on chain")
        send_alert(f"Migration failed on {network}: {e}", network, webhook, deployed)
        return 1

    for row in deployer.summary():
        logger.info(f"{row['contract_name']}: {row['address']} (tx {row['tx_hash']})")
    logger.info(f"Migration complete: {len(deployer.deployed)} contracts deployed to {network}")
    logger.info(f"Addresses recorded in {deployer.record.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
