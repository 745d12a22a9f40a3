"""Deploy any contract from an ABI artifact.

See :py:mod:`eth_shares.abi` how the artifacts are looked up.
"""

from pathlib import Path
from typing import Dict, Optional, TypeAlias, Union

from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

from eth_shares.abi import BytecodeMissing, get_contract

#: Manage internal registry of deployed contracts
#:
#: Lower case address -> Contract mapping.
ContractRegistry: TypeAlias = Dict[str, Contract]


class ContractDeploymentFailed(Exception):
    """Did not get successful tx receipt from a deployment."""

    def __init__(self, tx_hash, msg):
        super().__init__(msg)
        self.tx_hash = tx_hash


def get_tx_broadcast_data(signed_tx) -> HexBytes:
    """Get raw transaction payload from a signed transaction.

    Web3.py v6 and v7 use different attribute names.
    """
    if hasattr(signed_tx, "raw_transaction"):
        return signed_tx.raw_transaction
    return signed_tx.rawTransaction


def deploy_contract(
    web3: Web3,
    contract: Union[str, Contract],
    deployer: str | LocalAccount,
    *constructor_args,
    artifacts_path: Optional[Path] = None,
    register_for_tracing=True,
    gas: int = None,
) -> Contract:
    """Deploys a new contract from ABI file.

    A generic helper function to deploy any contract.

    Example:

    .. code-block:: python

        shares = deploy_contract(web3, "ETHShares.json", deployer, owner, subject, ...)
        print(f"Deployed shares at {shares.address}")

    :param web3:
        Web3 instance

    :param contract:
        Contract file name as string or contract proxy class

    :param deployer:
        Deployer account.

        Either address (unlocked on the node) or LocalAccount.

    :param constructor_args:
        Other arguments to pass to the contract's constructor

    :param artifacts_path:
        Compiled artifacts directory where the bytecode is looked up

    :param register_for_tracing:
        Record the contract and its name, see :py:func:`get_registered_contract`

    :param gas:
        Gas limit.

        If not set tries to estimate and probably may hit reverts when doing so.

    :raise BytecodeMissing:
        The contract ABI was found, but there is no bytecode to deploy.

    :raise ContractDeploymentFailed:
        In the case we could not deploy the contract.

    :return:
        Contract proxy instance
    """
    if isinstance(contract, str):
        Contract = get_contract(web3, contract, artifacts_path)
        contract_name = Path(contract).stem
    else:
        Contract = contract
        contract_name = None

    if not Contract.bytecode:
        raise BytecodeMissing(f"Contract {contract_name} has no bytecode, set the compiled artifacts path, was {artifacts_path}")

    if isinstance(deployer, LocalAccount):
        # Sign locally
        nonce = web3.eth.get_transaction_count(deployer.address)
        tx_params = {
            "from": deployer.address,
            "nonce": nonce,
            "chainId": web3.eth.chain_id,
        }
        if gas:
            tx_params["gas"] = gas
        tx_data = Contract.constructor(*constructor_args).build_transaction(tx_params)

        signed_tx = deployer.sign_transaction(tx_data)
        tx_hash = web3.eth.send_raw_transaction(get_tx_broadcast_data(signed_tx))
    else:
        # Delegate to test RPC
        tx_params = {"from": deployer}
        if gas:
            tx_params["gas"] = gas
        tx_hash = Contract.constructor(*constructor_args).transact(tx_params)

    tx_receipt = web3.eth.wait_for_transaction_receipt(tx_hash)
    if tx_receipt["status"] != 1:
        raise ContractDeploymentFailed(tx_hash, f"Contract {contract_name} deployment failed with args {constructor_args}, tx hash is {tx_hash.hex()}")

    instance = Contract(address=tx_receipt["contractAddress"])

    if register_for_tracing:
        instance.name = contract_name
        register_contract(web3, tx_receipt["contractAddress"], instance)

    return instance


def get_or_create_contract_registry(web3: Web3) -> ContractRegistry:
    """Contracts deployed or attached through this web3 connection.

    :py:class:`eth_shares.backend.Web3Backend` fills it,
    so a test can tell which shares market collaborator sits at an address.
    """
    if not hasattr(web3, "contract_registry"):
        web3.contract_registry = {}

    return web3.contract_registry


def register_contract(web3, address: HexAddress, instance: Contract):
    """Remember a deployed or attached contract, with ``instance.name`` set to its artifact name."""
    assert type(address) == str, f"address is {type(address)}, expected str"
    registry = get_or_create_contract_registry(web3)
    registry[address.lower()] = instance


def get_registered_contract(web3, address: str) -> Contract:
    """Which contract kind did we put at an address.

    .. code-block:: python

         deployment = deploy_shares_eth(backend, deployer)
         distributor = get_registered_contract(web3, deployment.holders_fee_destination)
         assert distributor.name == "HoldersRewardsDistributorV1"

    :return:
        Contract instance, or ``None`` for addresses not deployed or attached through :py:class:`eth_shares.backend.Web3Backend`
    """
    assert type(address) == str
    registry = get_or_create_contract_registry(web3)
    return registry.get(address.lower())
