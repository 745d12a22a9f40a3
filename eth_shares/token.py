"""Test token deployment.

- ERC-20 token used as a payment and reward token in tests

- ERC-721 token with royalties used as the shares subject
"""

import logging
from typing import Optional

from web3.contract import Contract

from eth_shares.backend import Deployer, DeploymentBackend, get_deployer_address

logger = logging.getLogger(__name__)

#: Default test ERC-721 name
NFT_NAME = "Custom ERC721"

#: Default test ERC-721 symbol
NFT_SYMBOL = "CER"

#: All the features of an access controlled token enabled.
#:
#: Features occupy the lower 16 bits of the permissions bitmask.
#:
FEATURE_ALL = 0x0000_FFFF


def deploy_ali_erc20(
    backend: DeploymentBackend,
    deployer: Deployer,
    initial_holder: Optional[str] = None,
) -> Contract:
    """Deploy the ALI ERC-20 token.

    The whole initial supply is minted to the initial holder.

    :param initial_holder:
        Receives the initial supply, defaults to the deployer

    :return:
        AliERC20v2 instance
    """
    if initial_holder is None:
        initial_holder = get_deployer_address(deployer)

    token = backend.deploy("AliERC20v2", initial_holder, deployer=deployer)
    logger.info("Deployed ALI ERC-20 at %s, initial holder %s", token.address, initial_holder)
    return token


def royal_nft_deploy_restricted(
    backend: DeploymentBackend,
    deployer: Deployer,
    name: str = NFT_NAME,
    symbol: str = NFT_SYMBOL,
) -> Contract:
    """Deploy RoyalERC721 with no features enabled.

    :param deployer:
        Contract deployer, owner and super admin

    :param name:
        ERC-721 descriptive name

    :param symbol:
        ERC-721 abbreviated name

    :return:
        RoyalERC721Mock instance
    """
    return backend.deploy("RoyalERC721Mock", name, symbol, deployer=deployer)


def deploy_royal_nft(
    backend: DeploymentBackend,
    deployer: Deployer,
    name: str = NFT_NAME,
    symbol: str = NFT_SYMBOL,
) -> Contract:
    """Deploy RoyalERC721 with all the features enabled.

    See :py:func:`royal_nft_deploy_restricted`.
    """
    token = royal_nft_deploy_restricted(backend, deployer, name, symbol)
    backend.transact(token, "updateFeatures", FEATURE_ALL, deployer=deployer)
    logger.info("Deployed royal NFT %s at %s", symbol, token.address)
    return token
