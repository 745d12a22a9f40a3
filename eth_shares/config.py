"""Configuration from environment variables.

- ``JSON_RPC_URL``: the node to deploy to, e.g. Anvil at ``http://localhost:8545``

- ``ETH_SHARES_ARTIFACTS``: compiled contract artifacts directory, e.g. ``artifacts`` of a Hardhat project

- ``LOG_LEVEL``: see :py:func:`eth_shares.utils.setup_console_logging`
"""

import os
from pathlib import Path

from web3 import HTTPProvider, Web3

from eth_shares.backend import Web3Backend

#: Environment variable for the compiled artifacts directory
ARTIFACTS_ENV = "ETH_SHARES_ARTIFACTS"

#: Environment variable for the JSON-RPC node
JSON_RPC_URL_ENV = "JSON_RPC_URL"


def read_artifacts_path() -> Path | None:
    """Read compiled artifacts directory from the environment.

    :raise ValueError:
        The variable points to a non-existing directory

    :return:
        Artifacts directory or ``None`` if not configured
    """
    value = os.environ.get(ARTIFACTS_ENV)
    if not value:
        return None

    path = Path(value).expanduser()
    if not path.is_dir():
        raise ValueError(f"{ARTIFACTS_ENV} is not a directory: {path}")
    return path


def read_json_rpc_url() -> str:
    """Read JSON-RPC URL from the environment.

    :raise ValueError: If the environment variable is not set.
    """
    json_rpc_url = os.environ.get(JSON_RPC_URL_ENV)
    if not json_rpc_url:
        raise ValueError(f"Environment variable {JSON_RPC_URL_ENV} is not set")
    return json_rpc_url


def create_backend_from_env(gas: int | None = None) -> Web3Backend:
    """Create a deployment backend from ``JSON_RPC_URL`` and ``ETH_SHARES_ARTIFACTS``."""
    web3 = Web3(HTTPProvider(read_json_rpc_url()))
    return Web3Backend(web3, artifacts_path=read_artifacts_path(), gas=gas)
