"""ABI loading from the bundled interfaces or a compiled artifacts directory.

Provides functions to load ABI files and construct :py:class:`web3.contract.Contract` types.
The results are cached for the speedup.

- The package ships interface-only ABI files in ``eth_shares/abi``.
  They are enough to attach to already deployed contracts and to encode calls.

- Deploying needs bytecode. Point ``artifacts_path`` (or ``ETH_SHARES_ARTIFACTS`` environment variable,
  see :py:mod:`eth_shares.config`) to the compiler output directory of the contracts project.
  Hardhat, Truffle and Foundry JSON artifacts all work.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence, Type

from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

logger = logging.getLogger(__name__)

# How big are our ABI and contract caches
_CACHE_SIZE = 512


#: Ethereum 0x0000000000000000000000000000000000000000 address as a string.
#:
#: Used as "no contract" marker when wiring contracts together,
#: e.g. a holders rewards distributor working in ETH mode.
#:
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class ArtifactNotFound(FileNotFoundError):
    """No ABI file for a contract kind."""


class BytecodeMissing(Exception):
    """We have an ABI for the contract kind, but no bytecode to deploy it."""


def _find_artifact(artifacts_path: Path, fname: str) -> Path | None:
    """Look up a compiled artifact.

    Hardhat stores ``artifacts/contracts/Foo.sol/Foo.json``,
    Truffle ``build/contracts/Foo.json`` and Foundry ``out/Foo.sol/Foo.json``.
    Debug files ``Foo.dbg.json`` do not match.

    When several sources define a contract with the same name,
    qualify the file name with its source, e.g. ``ERC20Spec.sol/ERC20.json``.
    """
    direct = artifacts_path / fname
    if direct.exists():
        return direct

    candidates = sorted(artifacts_path.rglob(fname))
    if len(candidates) > 1:
        logger.warning(
            "Several artifacts match %s, using %s. Candidates: %s. Qualify the name with its source file, e.g. Source.sol/%s",
            fname,
            candidates[0],
            [str(c) for c in candidates],
            Path(fname).name,
        )

    return next(iter(candidates), None)


@lru_cache(maxsize=_CACHE_SIZE)
def get_abi_by_filename(fname: str, artifacts_path: Optional[Path] = None) -> dict:
    """Reads an ABI file and returns it.

    Example::

        abi = get_abi_by_filename("ETHShares.json")

    You are most likely interested in the keys `abi` and `bytecode` of the JSON file.

    Any results are cached.

    :param fname:
        JSON filename, e.g. ``HoldersRewardsDistributorV1.json``

    :param artifacts_path:
        Compiled artifacts directory searched first.

        If not given, or the contract is not found there, use the bundled interface ABI.

    :raise ArtifactNotFound:
        Neither the artifacts directory nor the bundle has the file.

    :return: Full contract interface, including `bytecode` when compiled artifacts are used.
    """

    abi_path = None

    if artifacts_path is not None:
        abi_path = _find_artifact(Path(artifacts_path), fname)

    if abi_path is None:
        here = Path(__file__).resolve().parent
        abi_path = here / "abi" / Path(fname).name

    if not abi_path.exists():
        raise ArtifactNotFound(f"No ABI file {fname}, looked in {artifacts_path} and the bundled interfaces")

    with open(abi_path, "rt", encoding="utf-8") as f:
        abi = json.load(f)
    return abi


@lru_cache(maxsize=_CACHE_SIZE)
def get_contract(
    web3: Web3,
    fname: str,
    artifacts_path: Optional[Path] = None,
) -> Type[Contract]:
    """Get Contract proxy class from ABI JSON file.

    - ABI file can be a solc compiling artifact or a bare ABI list.

    `See Web3.py documentation on Contract instances <https://web3py.readthedocs.io/en/stable/contracts.html#contract-deployment-example>`_.

    Any results are cached. Web3 connection is part of the cache key.

    Example:

    .. code-block:: python

        HoldersRewardsDistributor = get_contract(web3, "HoldersRewardsDistributor.json")

    :param web3:
        Web3 instance

    :param fname:
        JSON filename

    :param artifacts_path:
        Compiled artifacts directory

    :return:
        Contract proxy class
    """

    contract_interface = get_abi_by_filename(fname, artifacts_path)

    if type(contract_interface) == list:
        # Bare ABI
        abi = contract_interface
        bytecode = None
    else:
        abi = contract_interface["abi"]
        bytecode = contract_interface.get("bytecode")

        if type(bytecode) == dict:
            # Forge
            # Contains keys object, sourceMap, linkReferences
            bytecode = bytecode["object"]

    if bytecode in ("", "0x"):
        # Interfaces and abstract contracts
        bytecode = None

    Contract = web3.eth.contract(abi=abi, bytecode=bytecode)
    return Contract


def get_deployed_contract(
    web3: Web3,
    fname: str,
    address: HexAddress | str,
    artifacts_path: Optional[Path] = None,
    register_for_tracing: bool = True,
) -> Contract:
    """Get a Contract proxy object for a contract deployed at a specific address.

    :param web3:
        Web3 instance

    :param fname:
        JSON filename

    :param address:
        Ethereum address of the deployed contract

    :param artifacts_path:
        Compiled artifacts directory

    :param register_for_tracing:
        Add the contract to the deployment registry if not already there.

    :return:
        `web3.contract.Contract` proxy
    """
    assert isinstance(web3, Web3), f"Got {type(web3)} instead of Web3"
    assert address, f"get_deployed_contract() address was None"

    address = Web3.to_checksum_address(address)

    Contract = get_contract(web3, fname, artifacts_path)
    contract = Contract(address)

    if register_for_tracing:
        from eth_shares.deploy import get_registered_contract, register_contract

        registered_contract = get_registered_contract(web3, address)
        if registered_contract is None:
            contract.name = Path(fname).stem
            register_contract(web3, address, contract)

    return contract


def encode_function_call(
    Contract: Type[Contract] | Contract,
    fn_name: str,
    args: Sequence,
) -> HexBytes:
    """Encode function selector + its arguments as data payload.

    Used to prepare proxy initialisation calls, where the call
    is not made directly, but passed to another constructor.

    Example:

    .. code-block:: python

        RewardSystem = get_contract(web3, "RewardSystem.json")
        init_data = encode_function_call(RewardSystem, "postConstruct", [ZERO_ADDRESS])

    :param Contract:
        Contract class or instance used as the ABI source

    :param fn_name:
        Solidity function name

    :param args:
        Argument values to be encoded.

    :return:
        Solidity's function selector + argument payload.
    """
    assert type(args) in (tuple, list), f"Got {type(args)}"

    # Web3.py v6 has encodeABI, v7 encode_abi
    if hasattr(Contract, "encodeABI"):
        encoded = Contract.encodeABI(fn_name=fn_name, args=list(args))
    else:
        encoded = Contract.encode_abi(abi_element_identifier=fn_name, args=list(args))

    return HexBytes(encoded)
