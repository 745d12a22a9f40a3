"""Upgradeable contract deployment behind ERC-1967 proxy.

All upgradeable contracts of the shares protocol follow the same pattern:

1. Deploy the implementation

2. Encode the initialisation call, usually ``postConstruct(...)``

3. Deploy ``ERC1967Proxy(implementation, init_data)``, which runs the initialiser

4. Use the proxy address with the implementation ABI
"""

import logging

from web3.contract import Contract

from eth_shares.backend import Deployer, DeploymentBackend

logger = logging.getLogger(__name__)


#: The proxy contract kind
ERC1967_PROXY = "ERC1967Proxy"


def deploy_proxied(
    backend: DeploymentBackend,
    deployer: Deployer,
    kind: str,
    init_method: str,
    *init_args,
) -> Contract:
    """Deploy a contract behind ERC-1967 proxy.

    Example:

    .. code-block:: python

        reward_system = deploy_proxied(backend, deployer, "RewardSystem", "postConstruct", ZERO_ADDRESS)

    :param kind:
        Implementation contract kind

    :param init_method:
        The initialiser function called through the proxy

    :param init_args:
        Arguments for the initialiser

    :return:
        The proxy as an instance of `kind`
    """
    impl = backend.deploy(kind, deployer=deployer)

    init_data = backend.encode_call(kind, init_method, *init_args)

    proxy = backend.deploy(ERC1967_PROXY, impl.address, init_data, deployer=deployer)

    logger.info("Deployed %s implementation at %s, proxy at %s", kind, impl.address, proxy.address)

    return backend.attach(kind, proxy.address)
