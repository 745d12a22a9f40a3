"""Shares contract deployment with its collaborators.

Stand up a complete shares market for a test:

.. code-block:: python

    from eth_shares.backend import Web3Backend
    from eth_shares.shares import deploy_shares_eth

    backend = Web3Backend(web3, artifacts_path=Path("artifacts"))
    deployment = deploy_shares_eth(backend, deployer)
    shares = deployment.shares

Any collaborator not given is deployed on demand:

- Subject NFT, minted to the issuer

- Protocol fee distributor

- Holders rewards distributor

- Payment token, for ERC-20 shares

Optional parameters use :py:data:`UNSET` to mark "not given".
This is different from the zero address, which is a valid value
e.g. for disabling the holders fee distributor.

After the shares contract is deployed, the holders rewards distributor
is told the shares contract address, as both contracts need to know each other.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

from eth_typing import HexAddress
from web3.contract import Contract

from eth_shares.abi import ZERO_ADDRESS
from eth_shares.backend import Deployer, DeploymentBackend, get_address, get_deployer_address
from eth_shares.distributor import deploy_holders_rewards_distributor, deploy_protocol_fee_distributor
from eth_shares.token import deploy_ali_erc20, deploy_royal_nft

logger = logging.getLogger(__name__)


class _Unset(enum.Enum):
    UNSET = "UNSET"

    def __repr__(self):
        return "UNSET"


#: Marker for a parameter that was not given
UNSET = _Unset.UNSET

#: Type of :py:data:`UNSET`
Unset = Literal[_Unset.UNSET]

#: Artifact of the plain ERC-20 interface used to attach payment tokens
ERC20_INTERFACE = "ERC20Spec.sol/ERC20"

#: The token id minted when we deploy a subject NFT ourselves
DEFAULT_SUBJECT_TOKEN_ID = 1086432204

#: 100% in the fixed point percent notation used by the contracts
ONE_HUNDRED_PERCENT = 10**18

#: 4%
DEFAULT_PROTOCOL_FEE_PERCENT = 40_000_000_000_000_000

#: 3%
DEFAULT_HOLDERS_FEE_PERCENT = 30_000_000_000_000_000

#: 3%
DEFAULT_SUBJECT_FEE_PERCENT = 30_000_000_000_000_000


class SharesImplementationType(enum.IntEnum):
    """Shares implementation types.

    Matches ``SharesFactory.ImplementationType`` enum.
    """

    #: Shares bought and sold for ETH
    ETH = 0

    #: Shares bought and sold for an ERC-20 payment token
    ERC20 = 1


@dataclass(frozen=True, slots=True)
class Subject:
    """Shares subject: the NFT a shares market is based on."""

    #: ERC-721 contract address
    token_address: HexAddress

    #: ERC-721 token id
    token_id: int

    def as_tuple(self) -> tuple[HexAddress, int]:
        """Solidity ``TradeableShares.SharesSubject`` struct."""
        return (self.token_address, self.token_id)


@dataclass(frozen=True, slots=True)
class BareAddress:
    """Holders fee distributor given as an address."""

    address: HexAddress


@dataclass(frozen=True, slots=True)
class Handle:
    """Holders fee distributor given as a deployed contract."""

    contract: Contract


#: Holders fee distributor as given by the caller.
#:
#: See :py:func:`classify_holders_fee_distributor`.
HoldersFeeDistributorRef = Unset | BareAddress | Handle


@dataclass(slots=True)
class SharesParameters:
    """Desired shares deployment.

    All actors default to :py:data:`UNSET`, resolved when deploying.

    - Contract collaborators are deployed on demand

    - Accounts default to the deployer
    """

    #: ERC-20 payment token or its address, ERC-20 shares only
    payment_token: Contract | HexAddress | Unset = UNSET

    #: The account the subject NFT is minted to when the subject is not given
    issuer: HexAddress | Unset = UNSET

    #: Shares subject, or ``(token_address, token_id)`` tuple
    subject: Subject | tuple | Unset = UNSET

    #: Protocol fee receiver, an account or a contract
    protocol_fee_destination: Contract | HexAddress | Unset = UNSET

    protocol_fee_percent: int = DEFAULT_PROTOCOL_FEE_PERCENT

    #: HoldersRewardsDistributor instance, its address or zero address.
    #:
    #: ``None`` works as zero address.
    holders_fee_distributor: Contract | HexAddress | Unset | None = UNSET

    holders_fee_percent: int = DEFAULT_HOLDERS_FEE_PERCENT

    subject_fee_percent: int = DEFAULT_SUBJECT_FEE_PERCENT

    #: Amount of shares to buy immediately on deployment
    amount: int = 0

    #: The account receiving the first shares
    beneficiary: HexAddress | Unset = UNSET

    #: The account receiving all the permissions on the shares contract
    owner: HexAddress | Unset = UNSET


@dataclass(frozen=True, slots=True)
class SharesDeployment:
    """Deployed shares and everything that went into deploying them."""

    implementation_type: SharesImplementationType

    owner: HexAddress

    subject: Subject

    #: Address passed to the shares constructor
    protocol_fee_destination: HexAddress

    protocol_fee_percent: int

    #: Address passed to the shares constructor, may be zero address
    holders_fee_destination: HexAddress

    #: Holders rewards distributor, linked to :py:attr:`shares`.
    #:
    #: ``None`` if zero address was used as the holders fee destination.
    holders_fee_distributor: Optional[Contract]

    holders_fee_percent: int

    subject_fee_percent: int

    amount: int

    beneficiary: HexAddress

    #: ETHShares or ERC20Shares instance
    shares: Contract

    #: ERC-20 shares only
    payment_token: Optional[Contract] = field(default=None)


def classify_holders_fee_distributor(value: Contract | HexAddress | Unset | None) -> HoldersFeeDistributorRef:
    """Tell apart unset, address and deployed contract.

    ``None`` is what :py:attr:`SharesDeployment.holders_fee_distributor` holds
    when the distributor was disabled, so it disables the distributor here too.
    """
    if value is UNSET:
        return UNSET
    if value is None:
        return BareAddress(ZERO_ADDRESS)
    if isinstance(value, str):
        return BareAddress(value)
    assert hasattr(value, "address"), f"Expected HoldersRewardsDistributor address or instance, got {value}"
    return Handle(value)


def resolve_holders_fee_distributor(
    backend: DeploymentBackend,
    deployer: Deployer,
    ref: HoldersFeeDistributorRef,
    payment_token: Contract | HexAddress = ZERO_ADDRESS,
) -> tuple[HexAddress, Optional[Contract]]:
    """Resolve the holders fee distributor.

    - Unset: deploy a new distributor for the payment token

    - Zero address: no distributor

    - Other address: attach to it

    - Contract: use as is

    :return:
        Tuple (holders fee destination address, distributor instance to link or ``None``)
    """
    if ref is UNSET:
        distributor = deploy_holders_rewards_distributor(backend, deployer, payment_token)
    elif isinstance(ref, BareAddress):
        if ref.address == ZERO_ADDRESS:
            logger.info("Holders fee distributor disabled")
            return ZERO_ADDRESS, None
        distributor = backend.attach("HoldersRewardsDistributor", ref.address)
        logger.info("Using existing holders fee distributor at %s", ref.address)
    else:
        assert isinstance(ref, Handle), f"Unknown holders fee distributor reference {ref}"
        distributor = ref.contract

    return distributor.address, distributor


def resolve_subject(
    backend: DeploymentBackend,
    deployer: Deployer,
    subject: Subject | tuple | Unset,
    issuer: HexAddress,
) -> Subject:
    """Use the given subject, or deploy an NFT and mint the subject to the issuer."""
    if subject is UNSET:
        nft = deploy_royal_nft(backend, deployer)
        subject = Subject(nft.address, DEFAULT_SUBJECT_TOKEN_ID)
        backend.transact(nft, "mint", issuer, subject.token_id, deployer=deployer)
        logger.info("Minted subject %s #%d to %s", nft.address, subject.token_id, issuer)
        return subject

    if isinstance(subject, Subject):
        return subject

    token_address, token_id = subject
    return Subject(token_address, token_id)


def resolve_payment_token(
    backend: DeploymentBackend,
    deployer: Deployer,
    payment_token: Contract | HexAddress | Unset,
) -> Contract:
    """Use the given ERC-20 or deploy the default test token."""
    if payment_token is UNSET:
        return deploy_ali_erc20(backend, deployer)

    if isinstance(payment_token, str):
        # Several sources in the contracts project define ERC20
        return backend.attach(ERC20_INTERFACE, payment_token)

    return payment_token


def _deploy_and_link(
    backend: DeploymentBackend,
    deployer: Deployer,
    implementation_type: SharesImplementationType,
    params: SharesParameters,
    subject: Subject,
    protocol_fee_destination: HexAddress,
    holders_fee_destination: HexAddress,
    holders_fee_distributor: Optional[Contract],
    payment_token: Optional[Contract],
) -> SharesDeployment:
    """Deploy the shares contract and tell the holders fee distributor about it."""

    deployer_address = get_deployer_address(deployer)
    owner = deployer_address if params.owner is UNSET else params.owner
    beneficiary = deployer_address if params.beneficiary is UNSET else params.beneficiary

    constructor_args = [
        owner,
        subject.as_tuple(),
        protocol_fee_destination,
        params.protocol_fee_percent,
        holders_fee_destination,
        params.holders_fee_percent,
        params.subject_fee_percent,
        params.amount,
        beneficiary,
    ]

    if implementation_type == SharesImplementationType.ERC20:
        kind = "ERC20Shares"
        constructor_args.append(payment_token.address)
    else:
        kind = "ETHShares"

    shares = backend.deploy(kind, *constructor_args, deployer=deployer)

    logger.info("Deployed %s at %s for subject %s #%d", kind, shares.address, subject.token_address, subject.token_id)

    # The distributor was deployed before the shares contract existed,
    # or is shared with other shares contracts
    if holders_fee_distributor is not None:
        backend.transact(holders_fee_distributor, "initializeSharesContractAddressIfRequired", shares.address, deployer=deployer)

    return SharesDeployment(
        implementation_type=implementation_type,
        owner=owner,
        subject=subject,
        protocol_fee_destination=protocol_fee_destination,
        protocol_fee_percent=params.protocol_fee_percent,
        holders_fee_destination=holders_fee_destination,
        holders_fee_distributor=holders_fee_distributor,
        holders_fee_percent=params.holders_fee_percent,
        subject_fee_percent=params.subject_fee_percent,
        amount=params.amount,
        beneficiary=beneficiary,
        shares=shares,
        payment_token=payment_token,
    )


def _get_params(params: Optional[SharesParameters], kwargs: dict) -> SharesParameters:
    if params is None:
        return SharesParameters(**kwargs)
    assert not kwargs, f"Give either SharesParameters or keyword arguments, not both: {kwargs}"
    return params


def deploy_shares_eth(
    backend: DeploymentBackend,
    deployer: Deployer,
    params: Optional[SharesParameters] = None,
    **kwargs,
) -> SharesDeployment:
    """Deploy ETHShares, shares bought and sold for ETH.

    Example:

    .. code-block:: python

        # Everything deployed from scratch
        deployment = deploy_shares_eth(backend, deployer)

        # No holders fee distributor
        deployment = deploy_shares_eth(backend, deployer, holders_fee_distributor=ZERO_ADDRESS)
        assert deployment.holders_fee_distributor is None

    :param backend:
        How to deploy

    :param deployer:
        Deployer account, also the default issuer, beneficiary and owner

    :param params:
        Desired deployment.

        Alternatively pass :py:class:`SharesParameters` fields as keyword arguments.

    :return:
        Deployed shares with all the resolved parameters
    """
    params = _get_params(params, kwargs)
    assert params.payment_token is UNSET, "ETH shares do not take a payment token, use deploy_shares_erc20()"

    deployer_address = get_deployer_address(deployer)
    issuer = deployer_address if params.issuer is UNSET else params.issuer

    subject = resolve_subject(backend, deployer, params.subject, issuer)

    if params.protocol_fee_destination is UNSET:
        reward_token = deploy_ali_erc20(backend, deployer)
        protocol_fee_destination = deploy_protocol_fee_distributor(backend, deployer, reward_token).address
    else:
        protocol_fee_destination = get_address(params.protocol_fee_destination)

    holders_fee_destination, holders_fee_distributor = resolve_holders_fee_distributor(
        backend,
        deployer,
        classify_holders_fee_distributor(params.holders_fee_distributor),
    )

    return _deploy_and_link(
        backend,
        deployer,
        SharesImplementationType.ETH,
        params,
        subject,
        protocol_fee_destination,
        holders_fee_destination,
        holders_fee_distributor,
        payment_token=None,
    )


def deploy_shares_erc20(
    backend: DeploymentBackend,
    deployer: Deployer,
    params: Optional[SharesParameters] = None,
    **kwargs,
) -> SharesDeployment:
    """Deploy ERC20Shares, shares bought and sold for an ERC-20 payment token.

    Same as :py:func:`deploy_shares_eth`, but the payment token is resolved first
    and the fee distributors deployed on demand work with the payment token.

    :param params:
        Desired deployment.

        Alternatively pass :py:class:`SharesParameters` fields as keyword arguments.

    :return:
        Deployed shares with all the resolved parameters, including :py:attr:`SharesDeployment.payment_token`
    """
    params = _get_params(params, kwargs)

    payment_token = resolve_payment_token(backend, deployer, params.payment_token)

    deployer_address = get_deployer_address(deployer)
    issuer = deployer_address if params.issuer is UNSET else params.issuer

    subject = resolve_subject(backend, deployer, params.subject, issuer)

    if params.protocol_fee_destination is UNSET:
        protocol_fee_destination = deploy_protocol_fee_distributor(backend, deployer, payment_token).address
    else:
        protocol_fee_destination = get_address(params.protocol_fee_destination)

    holders_fee_destination, holders_fee_distributor = resolve_holders_fee_distributor(
        backend,
        deployer,
        classify_holders_fee_distributor(params.holders_fee_distributor),
        payment_token,
    )

    return _deploy_and_link(
        backend,
        deployer,
        SharesImplementationType.ERC20,
        params,
        subject,
        protocol_fee_destination,
        holders_fee_destination,
        holders_fee_distributor,
        payment_token=payment_token,
    )


def deploy_shares(
    backend: DeploymentBackend,
    deployer: Deployer,
    implementation_type: SharesImplementationType,
    params: Optional[SharesParameters] = None,
    **kwargs,
) -> SharesDeployment:
    """Deploy shares of the given implementation type.

    See :py:func:`deploy_shares_eth` and :py:func:`deploy_shares_erc20`.
    """
    match implementation_type:
        case SharesImplementationType.ETH:
            return deploy_shares_eth(backend, deployer, params, **kwargs)
        case SharesImplementationType.ERC20:
            return deploy_shares_erc20(backend, deployer, params, **kwargs)
        case _:
            raise NotImplementedError(f"Unknown shares implementation type {implementation_type}")
