"""Environment configuration."""

import logging
from pathlib import Path

import pytest

from eth_shares.backend import Web3Backend
from eth_shares.config import create_backend_from_env, read_artifacts_path, read_json_rpc_url
from eth_shares.utils import setup_console_logging


def test_artifacts_path_not_set(monkeypatch):
    monkeypatch.delenv("ETH_SHARES_ARTIFACTS", raising=False)
    assert read_artifacts_path() is None


def test_artifacts_path(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("ETH_SHARES_ARTIFACTS", str(tmp_path))
    assert read_artifacts_path() == tmp_path


def test_artifacts_path_missing_dir(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("ETH_SHARES_ARTIFACTS", str(tmp_path / "nope"))
    with pytest.raises(ValueError):
        read_artifacts_path()


def test_json_rpc_url_not_set(monkeypatch):
    monkeypatch.delenv("JSON_RPC_URL", raising=False)
    with pytest.raises(ValueError):
        read_json_rpc_url()


def test_create_backend_from_env(monkeypatch, tmp_path: Path):
    """Backend is created without connecting."""
    monkeypatch.setenv("JSON_RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("ETH_SHARES_ARTIFACTS", str(tmp_path))
    backend = create_backend_from_env(gas=5_000_000)
    assert isinstance(backend, Web3Backend)
    assert backend.artifacts_path == tmp_path
    assert backend.gas == 5_000_000


def test_setup_console_logging(monkeypatch):
    """LOG_LEVEL wins over the default."""
    monkeypatch.setenv("LOG_LEVEL", "info")
    root = setup_console_logging()
    assert root is logging.getLogger()
    assert logging.getLogger("web3.RequestManager").level == logging.WARNING
