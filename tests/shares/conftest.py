"""Shares deployment fixtures.

The contracts are not compiled as a part of this package,
so the deployment logic is tested against a backend that records
what would have been deployed and called.
"""

from dataclasses import dataclass, field
from typing import Any

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from eth_shares.abi import ZERO_ADDRESS
from eth_shares.backend import DeploymentBackend


@dataclass
class RecordedContract:
    """A contract living in :py:class:`RecordingBackend`."""

    kind: str
    address: str
    constructor_args: tuple = ()

    #: Shared between all handles attached to the same address
    state: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Call:
    """One primitive call made through the backend."""

    op: str
    name: str
    args: tuple
    target: str | None = None


class RecordingBackend(DeploymentBackend):
    """Deploy nothing, remember everything."""

    def __init__(self):
        self.calls: list[Call] = []
        self.contracts: dict[str, RecordedContract] = {}
        self.fail_on_deploy: str | None = None
        self._counter = 0x1000

    def _next_address(self) -> str:
        self._counter += 1
        return Web3.to_checksum_address(f"0x{self._counter:040x}")

    def deploy(self, kind: str, *constructor_args, deployer) -> RecordedContract:
        self.calls.append(Call("deploy", kind, constructor_args))
        if kind == self.fail_on_deploy:
            raise RuntimeError(f"{kind} deployment reverted")
        contract = RecordedContract(kind, self._next_address(), constructor_args)
        if kind.endswith("HoldersRewardsDistributorV1") or kind.endswith("HoldersRewardsDistributor"):
            contract.state["shares_contract"] = constructor_args[1]
        self.contracts[contract.address] = contract
        return contract

    def attach(self, kind: str, address: str) -> RecordedContract:
        self.calls.append(Call("attach", kind, (address,)))
        existing = self.contracts.get(address)
        state = existing.state if existing else {"shares_contract": ZERO_ADDRESS}
        return RecordedContract(kind, address, state=state)

    def transact(self, contract: RecordedContract, method: str, *args, deployer) -> Any:
        self.calls.append(Call("transact", method, args, target=contract.address))
        if method == "initializeSharesContractAddressIfRequired":
            # Mimic the distributor guard: bind only once
            if contract.state.get("shares_contract", ZERO_ADDRESS) == ZERO_ADDRESS:
                contract.state["shares_contract"] = args[0]
        return {"status": 1}

    def encode_call(self, kind: str, method: str, *args) -> bytes:
        return f"{kind}.{method}{args}".encode()

    def deployed(self, kind: str) -> list[Call]:
        """All deployments of a contract kind."""
        return [c for c in self.calls if c.op == "deploy" and c.name == kind]

    def transactions(self, method: str) -> list[Call]:
        """All transactions calling a method."""
        return [c for c in self.calls if c.op == "transact" and c.name == method]


@pytest.fixture()
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture()
def deployer() -> str:
    """Deploy account."""
    return Web3.to_checksum_address("0x00000000000000000000000000000000000000a0")


@pytest.fixture()
def user_1() -> str:
    """User account."""
    return Web3.to_checksum_address("0x00000000000000000000000000000000000000b1")


@pytest.fixture()
def user_2() -> str:
    """User account."""
    return Web3.to_checksum_address("0x00000000000000000000000000000000000000b2")


@pytest.fixture()
def hot_wallet() -> LocalAccount:
    """Deployer signing with a local private key."""
    return Account.create()
