"""Deployment primitives.

The deployment helpers in this package do not talk to a chain directly.
They go through a :py:class:`DeploymentBackend` that knows how to

- deploy a named contract kind with constructor arguments

- attach to an existing address as a named contract kind

- send a transaction to a deployed contract

- encode a function call payload, e.g. for proxy initialisation

:py:class:`Web3Backend` is the implementation for a live Web3.py connection
(Anvil, Hardhat node, eth-tester, a testnet).

Any failure in the underlying calls propagates to the caller as is.
There are no retries and no cleanup of already deployed contracts.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

from eth_shares.abi import encode_function_call, get_contract, get_deployed_contract
from eth_shares.deploy import deploy_contract, get_tx_broadcast_data


logger = logging.getLogger(__name__)


#: Deployer is either an unlocked node account or a local private key
Deployer = HexAddress | str | LocalAccount


class ContractTransactionFailed(Exception):
    """Did not get successful tx receipt from a contract call."""

    def __init__(self, tx_hash, msg):
        super().__init__(msg)
        self.tx_hash = tx_hash


def get_deployer_address(deployer: Deployer) -> HexAddress:
    """Get the address of the deployer account."""
    if isinstance(deployer, LocalAccount):
        return deployer.address
    return deployer


def get_address(actor: Contract | HexAddress | str) -> HexAddress:
    """Reduce a contract handle or an address to an address."""
    address = getattr(actor, "address", actor)
    assert type(address) == str, f"Expected address or contract handle, got {type(actor)}"
    return address


class DeploymentBackend(ABC):
    """Deploy and attach to contracts by their kind.

    Contract kind is the contract name, e.g. ``HoldersRewardsDistributorV1``.

    Handles returned from :py:meth:`deploy` and :py:meth:`attach` have an ``address`` attribute.
    """

    @abstractmethod
    def deploy(self, kind: str, *constructor_args, deployer: Deployer) -> Contract:
        """Deploy a new contract.

        :return:
            Handle to the deployed contract
        """

    @abstractmethod
    def attach(self, kind: str, address: HexAddress | str) -> Contract:
        """Wrap an existing address as a handle, without deploying."""

    @abstractmethod
    def transact(self, contract: Contract, method: str, *args, deployer: Deployer) -> Any:
        """Call a state changing method and wait until it is mined.

        :return:
            Transaction receipt
        """

    @abstractmethod
    def encode_call(self, kind: str, method: str, *args) -> bytes:
        """Encode the call payload of ``method(*args)`` using the ABI of ``kind``."""


class Web3Backend(DeploymentBackend):
    """Deployment primitives over a Web3.py connection.

    Example:

    .. code-block:: python

        web3 = Web3(HTTPProvider("http://localhost:8545"))
        backend = Web3Backend(web3, artifacts_path=Path("artifacts"))
        deployment = deploy_shares_eth(backend, web3.eth.accounts[0])
    """

    def __init__(
        self,
        web3: Web3,
        artifacts_path: Optional[Path] = None,
        gas: Optional[int] = None,
    ):
        """
        :param web3:
            Web3 connection

        :param artifacts_path:
            Compiled contract artifacts directory.

            Needed for deployments. Attaching and encoding work with the bundled ABI files.

        :param gas:
            Fixed gas limit for deployments and transactions.

            If not set, estimate.
        """
        assert isinstance(web3, Web3), f"Got {type(web3)}"
        self.web3 = web3
        self.artifacts_path = Path(artifacts_path) if artifacts_path else None
        self.gas = gas

    def __repr__(self):
        return f"<Web3Backend artifacts:{self.artifacts_path}>"

    def deploy(self, kind: str, *constructor_args, deployer: Deployer) -> Contract:
        contract = deploy_contract(
            self.web3,
            f"{kind}.json",
            deployer,
            *constructor_args,
            artifacts_path=self.artifacts_path,
            gas=self.gas,
        )
        logger.debug("Deployed %s at %s", kind, contract.address)
        return contract

    def attach(self, kind: str, address: HexAddress | str) -> Contract:
        return get_deployed_contract(self.web3, f"{kind}.json", address, artifacts_path=self.artifacts_path)

    def transact(self, contract: Contract, method: str, *args, deployer: Deployer) -> Any:
        web3 = self.web3
        bound_func = contract.functions[method](*args)

        if isinstance(deployer, LocalAccount):
            tx_params = {
                "from": deployer.address,
                "nonce": web3.eth.get_transaction_count(deployer.address),
                "chainId": web3.eth.chain_id,
            }
            if self.gas:
                tx_params["gas"] = self.gas
            signed_tx = deployer.sign_transaction(bound_func.build_transaction(tx_params))
            tx_hash = web3.eth.send_raw_transaction(get_tx_broadcast_data(signed_tx))
        else:
            tx_params = {"from": deployer}
            if self.gas:
                tx_params["gas"] = self.gas
            tx_hash = bound_func.transact(tx_params)

        receipt = web3.eth.wait_for_transaction_receipt(tx_hash)
        if receipt["status"] != 1:
            raise ContractTransactionFailed(tx_hash, f"{method}{args} on {contract.address} failed, tx hash is {tx_hash.hex()}")
        return receipt

    def encode_call(self, kind: str, method: str, *args) -> HexBytes:
        Contract = get_contract(self.web3, f"{kind}.json", self.artifacts_path)
        return encode_function_call(Contract, method, args)
