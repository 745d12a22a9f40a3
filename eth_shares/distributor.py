"""Fee distributor deployment.

- Protocol fee distributor collects the protocol cut of shares trades.
  Upgradeable, deployed behind ERC-1967 proxy.

- Holders rewards distributor collects the holders cut and distributes
  it among the shares holders. A plain contract.

The holders rewards distributor and the shares contract need to know each other.
The distributor is deployed first, with or without the shares address,
and the shares address is set later with ``initializeSharesContractAddressIfRequired``,
see :py:func:`eth_shares.shares.deploy_shares_eth`.
"""

import logging

from eth_typing import HexAddress
from web3.contract import Contract

from eth_shares.abi import ZERO_ADDRESS
from eth_shares.backend import Deployer, DeploymentBackend, get_address, get_deployer_address
from eth_shares.proxy import deploy_proxied

logger = logging.getLogger(__name__)


def deploy_protocol_fee_distributor(
    backend: DeploymentBackend,
    deployer: Deployer,
    reward_token: Contract | HexAddress,
    malicious: bool = False,
) -> Contract:
    """Deploy ProtocolFeeDistributorV1 via ERC-1967 proxy.

    :param reward_token:
        Rewards ERC-20 token or its address

    :param malicious:
        Deploy a malicious implementation mock consuming all the gas

    :return:
        ProtocolFeeDistributorV1 instance
    """
    kind = "MaliciousFeeDistributor" if malicious else "ProtocolFeeDistributorV1"
    return deploy_proxied(backend, deployer, kind, "postConstruct", get_address(reward_token))


def deploy_holders_rewards_distributor(
    backend: DeploymentBackend,
    deployer: Deployer,
    payment_token: Contract | HexAddress = ZERO_ADDRESS,
    shares: Contract | HexAddress = ZERO_ADDRESS,
    malicious: bool = False,
) -> Contract:
    """Deploy HoldersRewardsDistributor.

    The distributor accepts the shares holders fees and
    the sync messages in the ``abi.encode(trader, amount)`` format.

    :param payment_token:
        Payment token or its address, zero address means ETH mode

    :param shares:
        Shares contract to bind to, or its address.

        Zero address does not bind.

    :param malicious:
        Deploy a malicious implementation mock consuming all the gas

    :return:
        HoldersRewardsDistributor instance
    """
    kind = "MaliciousHoldersRewardsDistributor" if malicious else "HoldersRewardsDistributorV1"
    distributor = backend.deploy(
        kind,
        get_deployer_address(deployer),
        get_address(shares),
        get_address(payment_token),
        deployer=deployer,
    )
    logger.info("Deployed %s at %s, payment token %s", kind, distributor.address, get_address(payment_token))
    return distributor
