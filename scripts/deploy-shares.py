"""Deploy a shares market with all its collaborators to a test node.

- Deploys everything from scratch: subject NFT, fee distributors, payment token for ERC-20 shares

- Prints out the addresses

Example:

.. code-block:: shell

    anvil &
    export JSON_RPC_URL=http://localhost:8545
    export ETH_SHARES_ARTIFACTS=~/code/shares-contracts/artifacts
    export SHARES_TYPE=erc20
    python scripts/deploy-shares.py

Set ``PRIVATE_KEY`` to deploy from a local account instead of the first unlocked node account.
"""

import os

from eth_account import Account

from eth_shares.config import create_backend_from_env
from eth_shares.shares import SharesImplementationType, deploy_shares
from eth_shares.utils import setup_console_logging

setup_console_logging(default_log_level="info")

backend = create_backend_from_env()
web3 = backend.web3
print(f"Connected to blockchain, chain id is {web3.eth.chain_id}. the latest block is {web3.eth.block_number:,}")

private_key = os.environ.get("PRIVATE_KEY")
if private_key:
    assert private_key.startswith("0x"), "Private key must start with 0x hex prefix"
    deployer = Account.from_key(private_key)
else:
    deployer = web3.eth.accounts[0]

implementation_type = SharesImplementationType[os.environ.get("SHARES_TYPE", "eth").upper()]

deployment = deploy_shares(backend, deployer, implementation_type)

print(f"Shares ({implementation_type.name}): {deployment.shares.address}")
print(f"Subject: {deployment.subject.token_address} #{deployment.subject.token_id}")
print(f"Protocol fee destination: {deployment.protocol_fee_destination}")
print(f"Holders fee destination: {deployment.holders_fee_destination}")
if deployment.payment_token is not None:
    print(f"Payment token: {deployment.payment_token.address}")
