"""Reward system deployment.

The same ``RewardSystem`` implementation works either in ETH mode,
initialised with the zero address, or in ERC-20 mode, initialised with the reward token.
"""

from eth_typing import HexAddress
from web3.contract import Contract

from eth_shares.abi import ZERO_ADDRESS
from eth_shares.backend import Deployer, DeploymentBackend, get_address
from eth_shares.proxy import deploy_proxied


def deploy_eth_reward_system(backend: DeploymentBackend, deployer: Deployer) -> Contract:
    """Deploy the ETH reward system via ERC-1967 proxy.

    :return:
        RewardSystem instance
    """
    return deploy_proxied(backend, deployer, "RewardSystem", "postConstruct", ZERO_ADDRESS)


def deploy_erc20_reward_system(
    backend: DeploymentBackend,
    deployer: Deployer,
    token: Contract | HexAddress,
) -> Contract:
    """Deploy the ERC-20 reward system via ERC-1967 proxy.

    :param token:
        ERC-20 reward token or its address

    :return:
        RewardSystem instance
    """
    token_address = get_address(token)
    assert token_address != ZERO_ADDRESS, "ERC-20 reward system needs a token, use deploy_eth_reward_system() for ETH"
    return deploy_proxied(backend, deployer, "RewardSystem", "postConstruct", token_address)
