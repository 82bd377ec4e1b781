#!/usr/bin/env python3
"""
Web3 deployer for compiled contracts

Publishes artifacts to the network described by a NetworkContext and records
the resulting addresses in deployments/<network>.json.
Supports a local signing key (PRIVATE_KEY) or an unlocked node account.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception, Web3ValidationError
from web3.middleware import ExtraDataToPOAMiddleware

from .artifacts import ArtifactStore
from .config import NetworkContext
from .contracts import ContractKind
from .errors import (
    ConfigurationError,
    InsufficientFunds,
    NetworkUnavailable,
    TransactionFailure,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeployedInstance:
    """A contract confirmed on chain"""
    kind: ContractKind
    contract_name: str
    address: str
    tx_hash: str
    block_number: int
    gas_used: int


class DeploymentRecord:
    """
    Per-network JSON file of deployed addresses

    Layout mirrors what the off-chain tooling reads:
    {"network": ..., "chainId": ..., "contracts": {name: address}, "roles": {"deployer": address}}
    """

    def __init__(self, records_dir: str, network: str):
        self.path = os.path.join(records_dir, f"{network}.json")
        self.network = network
        self.data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {'network': self.network, 'chainId': None, 'contracts': {}, 'roles': {}}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Could not read deployment record {self.path}: {e}") from e
        data.setdefault('contracts', {})
        data.setdefault('roles', {})
        return data

    def add(self, instance: DeployedInstance, deployer_address: str, chain_id: Optional[int] = None):
        self.data['network'] = self.network
        if chain_id is not None:
            self.data['chainId'] = chain_id
        self.data['contracts'][instance.contract_name] = instance.address
        self.data['roles']['deployer'] = deployer_address
        self.data['updatedAt'] = datetime.now().isoformat()
        self.save()

    def save(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self.data, f, indent=2)


class Web3Deployer:
    """Deploys contract kinds through a JSON-RPC endpoint"""

    def __init__(self, context: NetworkContext, store: ArtifactStore, w3: Optional[Web3] = None):
        self.context = context
        self.store = store
        self.w3: Optional[Web3] = w3
        self.record = DeploymentRecord(context.records_dir, context.network)
        self._account: Optional[Any] = None
        self._chain_id: Optional[int] = None
        self._deployed: List[DeployedInstance] = []

    @property
    def deployed(self) -> List[DeployedInstance]:
        return list(self._deployed)

    def connect(self) -> Web3:
        """Initialize Web3 connection"""
        if self.w3 is None:
            self.w3 = Web3(Web3.HTTPProvider(self.context.rpc_url))
            self.w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        if not self.w3.is_connected():
            raise NetworkUnavailable(f"Could not connect to RPC URL: {self.context.rpc_url}")

        try:
            self._chain_id = self.w3.eth.chain_id
        except requests.exceptions.RequestException as e:
            raise NetworkUnavailable(f"Could not read chain id from {self.context.rpc_url}: {e}") from e
        if self.context.chain_id is not None and self._chain_id != self.context.chain_id:
            raise ConfigurationError(
                f"RPC endpoint reports chain id {self._chain_id}, expected {self.context.chain_id}"
            )

        if self.context.private_key:
            self._account = self.w3.eth.account.from_key(self.context.private_key)
            logger.info(f"Using deployer account: {self._account.address}")

        logger.info(f"Connected to {self.context.network} at {self.context.rpc_url} (chain id {self._chain_id})")
        return self.w3

    def _require_w3(self) -> Web3:
        if self.w3 is None:
            raise NetworkUnavailable("Deployer is not connected")
        return self.w3

    def accounts(self) -> List[str]:
        """Accounts available for signing on this network"""
        if self._account is not None:
            return [self._account.address]
        w3 = self._require_w3()
        try:
            return list(w3.eth.accounts)
        except requests.exceptions.RequestException as e:
            raise NetworkUnavailable(f"Could not list accounts on {self.context.rpc_url}: {e}") from e

    @property
    def sender(self) -> str:
        if self._account is not None:
            return self._account.address
        accounts = self.accounts()
        if not accounts:
            raise ConfigurationError("No signing account: set PRIVATE_KEY or unlock an account on the node")
        return accounts[0]

    def _estimate_gas(self, constructor, sender: str) -> int:
        if self.context.gas_limit is not None:
            return self.context.gas_limit
        estimate = constructor.estimate_gas({'from': sender})
        return int(estimate * self.context.gas_multiplier)

    def _check_balance(self, sender: str, gas: int, gas_price: int):
        w3 = self._require_w3()
        required = gas * gas_price
        balance = w3.eth.get_balance(sender)
        if balance < required:
            raise InsufficientFunds(
                f"Account {sender} holds {balance} wei, deployment needs up to {required} wei"
            )

    def _send(self, constructor, sender: str, gas: int, gas_price: int) -> bytes:
        w3 = self._require_w3()
        if self._account is None:
            return constructor.transact({'from': sender, 'gas': gas, 'gasPrice': gas_price})

        tx_params: Dict[str, Any] = {
            'from': sender,
            'nonce': w3.eth.get_transaction_count(sender, 'pending'),
            'gas': gas,
            'gasPrice': gas_price,
        }
        if self._chain_id is not None:
            tx_params['chainId'] = self._chain_id
        tx = constructor.build_transaction(tx_params)
        signed_tx = w3.eth.account.sign_transaction(tx, self.context.private_key)
        return w3.eth.send_raw_transaction(signed_tx.raw_transaction)

    def deploy(self, kind: ContractKind, *constructor_args) -> DeployedInstance:
        """
        Publish one contract and wait for it to be mined

        Args:
            kind: Contract to deploy
            constructor_args: Positional constructor arguments, if any

        Returns:
            DeployedInstance with the on-chain address

        Raises:
            ArtifactNotFound, InsufficientFunds, NetworkUnavailable, TransactionFailure
        """
        w3 = self._require_w3()
        artifact = self.store.load(kind)

        try:
            sender = self.sender
            factory = w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
            # argument count or types that do not fit the compiled constructor
            constructor = factory.constructor(*constructor_args)
        except (TypeError, Web3ValidationError) as e:
            raise TransactionFailure(
                f"{artifact.contract_name} constructor does not match the given arguments: {e}"
            ) from e

        try:
            gas = self._estimate_gas(constructor, sender)
            if self.context.gas_price_wei is not None:
                gas_price = self.context.gas_price_wei
            else:
                gas_price = w3.eth.gas_price
            self._check_balance(sender, gas, gas_price)

            tx_hash = self._send(constructor, sender, gas, gas_price)
            tx_hash_hex = Web3.to_hex(tx_hash)
            logger.info(f"Deploying {artifact.contract_name}: transaction {tx_hash_hex} sent")

            receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.context.receipt_timeout)
        except TimeExhausted as e:
            raise TransactionFailure(
                f"{artifact.contract_name} deployment not mined within {self.context.receipt_timeout}s: {e}"
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkUnavailable(f"Lost connection to {self.context.rpc_url}: {e}") from e
        except (Web3Exception, ValueError) as e:
            if "insufficient funds" in str(e).lower():
                raise InsufficientFunds(f"{artifact.contract_name} deployment rejected: {e}") from e
            raise TransactionFailure(f"{artifact.contract_name} deployment failed: {e}") from e

        if receipt['status'] != 1 or not receipt.get('contractAddress'):
            raise TransactionFailure(
                f"{artifact.contract_name} deployment reverted in transaction {tx_hash_hex}"
            )

        instance = DeployedInstance(
            kind=kind,
            contract_name=artifact.contract_name,
            address=Web3.to_checksum_address(receipt['contractAddress']),
            tx_hash=tx_hash_hex,
            block_number=receipt['blockNumber'],
            gas_used=receipt['gasUsed'],
        )
        logger.info(
            f"{instance.contract_name} deployed at {instance.address} "
            f"in block {instance.block_number} (gas used: {instance.gas_used})"
        )

        self._deployed.append(instance)
        self.record.add(instance, sender, self._chain_id)
        return instance

    def summary(self) -> List[Dict[str, Any]]:
        """Deployed instances as plain dicts, in deployment order"""
        rows = []
        for instance in self._deployed:
            row = asdict(instance)
            row['kind'] = instance.kind.name
            rows.append(row)
        return rows
