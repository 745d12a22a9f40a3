"""Hive registry deployment."""

from eth_typing import HexAddress
from web3.contract import Contract

from eth_shares.backend import Deployer, DeploymentBackend, get_address
from eth_shares.proxy import deploy_proxied


def deploy_hive_registry_pure(
    backend: DeploymentBackend,
    deployer: Deployer,
    persona: Contract | HexAddress,
    inft: Contract | HexAddress,
    staking: Contract | HexAddress,
) -> Contract:
    """Deploy HiveRegistryV1 via ERC-1967 proxy.

    Only the registry is deployed, the collaborating contracts must exist already.

    :param persona:
        Persona NFT or its address

    :param inft:
        Intelligent NFT or its address

    :param staking:
        NFT staking contract or its address

    :return:
        HiveRegistryV1 instance
    """
    return deploy_proxied(
        backend,
        deployer,
        "HiveRegistryV1",
        "postConstruct",
        get_address(persona),
        get_address(inft),
        get_address(staking),
    )
