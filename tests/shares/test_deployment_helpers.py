"""Collaborator contract deployment helpers."""

import pytest

from eth_shares.abi import ZERO_ADDRESS
from eth_shares.distributor import deploy_holders_rewards_distributor, deploy_protocol_fee_distributor
from eth_shares.hive_registry import deploy_hive_registry_pure
from eth_shares.proxy import deploy_proxied
from eth_shares.reward_system import deploy_erc20_reward_system, deploy_eth_reward_system
from eth_shares.shares import (
    UNSET,
    BareAddress,
    Handle,
    classify_holders_fee_distributor,
    resolve_holders_fee_distributor,
)
from eth_shares.token import deploy_ali_erc20, deploy_royal_nft, royal_nft_deploy_restricted


def test_deploy_proxied(backend, deployer, user_1):
    """Implementation, proxy with init payload, then the proxy as the implementation."""
    contract = deploy_proxied(backend, deployer, "RewardSystem", "postConstruct", user_1)

    impl, proxy, attach = backend.calls
    assert (impl.op, impl.name, impl.args) == ("deploy", "RewardSystem", ())
    assert (proxy.op, proxy.name) == ("deploy", "ERC1967Proxy")
    impl_address = proxy.args[0]
    assert backend.contracts[impl_address].kind == "RewardSystem"
    assert proxy.args[1] == f"RewardSystem.postConstruct{(user_1,)}".encode()
    assert (attach.op, attach.name) == ("attach", "RewardSystem")

    assert contract.kind == "RewardSystem"
    assert backend.contracts[contract.address].kind == "ERC1967Proxy"


def test_deploy_protocol_fee_distributor(backend, deployer):
    """Reward token handle is passed to the initialiser as an address."""
    token = deploy_ali_erc20(backend, deployer)
    distributor = deploy_protocol_fee_distributor(backend, deployer, token)

    assert distributor.kind == "ProtocolFeeDistributorV1"
    (proxy_deploy,) = backend.deployed("ERC1967Proxy")
    assert proxy_deploy.args[1] == f"ProtocolFeeDistributorV1.postConstruct{(token.address,)}".encode()


def test_deploy_malicious_protocol_fee_distributor(backend, deployer, user_1):
    """Gas consuming mock implementation."""
    distributor = deploy_protocol_fee_distributor(backend, deployer, user_1, malicious=True)
    assert distributor.kind == "MaliciousFeeDistributor"
    assert backend.deployed("ProtocolFeeDistributorV1") == []


def test_deploy_holders_rewards_distributor_defaults(backend, deployer):
    """ETH mode, not bound to shares."""
    distributor_call_count = len(backend.calls)
    distributor = deploy_holders_rewards_distributor(backend, deployer)

    assert len(backend.calls) == distributor_call_count + 1
    assert distributor.kind == "HoldersRewardsDistributorV1"
    assert distributor.constructor_args == (deployer, ZERO_ADDRESS, ZERO_ADDRESS)


def test_deploy_holders_rewards_distributor_bound(backend, deployer, user_1, user_2):
    """Payment token and shares given."""
    distributor = deploy_holders_rewards_distributor(backend, deployer, payment_token=user_1, shares=user_2, malicious=True)

    assert distributor.kind == "MaliciousHoldersRewardsDistributor"
    assert distributor.constructor_args == (deployer, user_2, user_1)


def test_deploy_reward_systems(backend, deployer, user_1):
    """ETH mode initialises with zero address, ERC-20 mode with the token."""
    eth_rewards = deploy_eth_reward_system(backend, deployer)
    erc20_rewards = deploy_erc20_reward_system(backend, deployer, user_1)

    assert eth_rewards.kind == erc20_rewards.kind == "RewardSystem"
    eth_proxy, erc20_proxy = backend.deployed("ERC1967Proxy")
    assert eth_proxy.args[1] == f"RewardSystem.postConstruct{(ZERO_ADDRESS,)}".encode()
    assert erc20_proxy.args[1] == f"RewardSystem.postConstruct{(user_1,)}".encode()


def test_erc20_reward_system_needs_token(backend, deployer):
    """Zero address is ETH mode, not ERC-20."""
    with pytest.raises(AssertionError):
        deploy_erc20_reward_system(backend, deployer, ZERO_ADDRESS)


def test_deploy_hive_registry(backend, deployer, user_1, user_2):
    """Registry initialiser receives all three collaborators."""
    staking = deploy_holders_rewards_distributor(backend, deployer)
    registry = deploy_hive_registry_pure(backend, deployer, user_1, user_2, staking)

    assert registry.kind == "HiveRegistryV1"
    (proxy_deploy,) = backend.deployed("ERC1967Proxy")
    assert proxy_deploy.args[1] == f"HiveRegistryV1.postConstruct{(user_1, user_2, staking.address)}".encode()


def test_deploy_royal_nft(backend, deployer):
    """Restricted NFT has no features, the default one has all."""
    restricted = royal_nft_deploy_restricted(backend, deployer, "Persona", "PER")
    assert restricted.constructor_args == ("Persona", "PER")
    assert backend.transactions("updateFeatures") == []

    nft = deploy_royal_nft(backend, deployer)
    (update,) = backend.transactions("updateFeatures")
    assert update.target == nft.address
    assert update.args == (0xFFFF,)


def test_deploy_ali_erc20_holder(backend, deployer, user_1):
    """Initial supply goes to the given holder."""
    token = deploy_ali_erc20(backend, deployer, initial_holder=user_1)
    assert token.constructor_args == (user_1,)


def test_classify_holders_fee_distributor(backend, deployer, user_1):
    """Unset, bare address and handle are told apart."""
    distributor = deploy_holders_rewards_distributor(backend, deployer)

    assert classify_holders_fee_distributor(UNSET) is UNSET
    assert classify_holders_fee_distributor(user_1) == BareAddress(user_1)
    assert classify_holders_fee_distributor(ZERO_ADDRESS) == BareAddress(ZERO_ADDRESS)
    assert classify_holders_fee_distributor(None) == BareAddress(ZERO_ADDRESS)
    assert classify_holders_fee_distributor(distributor) == Handle(distributor)


def test_resolve_holders_fee_distributor(backend, deployer, user_1):
    """Each reference resolves to a destination and an optional link target."""
    destination, distributor = resolve_holders_fee_distributor(backend, deployer, BareAddress(ZERO_ADDRESS))
    assert (destination, distributor) == (ZERO_ADDRESS, None)
    assert backend.calls == []

    destination, distributor = resolve_holders_fee_distributor(backend, deployer, BareAddress(user_1))
    assert destination == distributor.address == user_1
    assert backend.deployed("HoldersRewardsDistributorV1") == []

    destination, distributor = resolve_holders_fee_distributor(backend, deployer, UNSET, payment_token=user_1)
    assert distributor.constructor_args == (deployer, ZERO_ADDRESS, user_1)

    destination, same = resolve_holders_fee_distributor(backend, deployer, Handle(distributor))
    assert same is distributor
    assert len(backend.deployed("HoldersRewardsDistributorV1")) == 1
