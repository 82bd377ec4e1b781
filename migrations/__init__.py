"""
WJ Contract Migrations
======================

Scripts for deploying the WJ token contracts.

Structure:
- contracts: Contract kinds and their artifact names
- artifacts: Truffle/Hardhat artifact loading
- config: Network context from the environment
- deployer: Web3 deployer and deployment records
- directive: The initial migration (fixed deployment order)
- runner: Command-line entry point
"""

__version__ = "1.0.0"
__author__ = "WJ Team"
