"""Tests for environment-driven settings."""

import pytest

from pysetcode import load_settings
from pysetcode.config import LOCALHOST_CHAIN_ID, SEPOLIA_CHAIN_ID
from pysetcode.submitter import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT

from .conftest import AUTHORIZER_KEY, DELEGATE, SPONSOR_KEY

ENV_VARS = (
    "RPC_URL",
    "CHAIN_ID",
    "AUTHORIZER_PRIVATE_KEY",
    "SPONSOR_PRIVATE_KEY",
    "DELEGATE_ADDRESS",
    "POLL_INTERVAL",
    "RECEIPT_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Unset every recognized variable and run from an empty directory."""
    for name in ENV_VARS:
        # setenv first so monkeypatch restores the variable's original absence
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_chain_ids():
    assert SEPOLIA_CHAIN_ID == 11155111
    assert LOCALHOST_CHAIN_ID == 31337


def test_missing_rpc_url(clean_env):
    with pytest.raises(ValueError, match="RPC_URL"):
        load_settings()


def test_defaults(clean_env):
    clean_env.setenv("RPC_URL", "http://localhost:8545")
    settings = load_settings()
    assert settings.rpc_url == "http://localhost:8545"
    assert settings.chain_id is None
    assert settings.authorizer_key is None
    assert settings.sponsor_key is None
    assert settings.poll_interval == DEFAULT_POLL_INTERVAL
    assert settings.timeout == DEFAULT_TIMEOUT


def test_environment(clean_env):
    clean_env.setenv("RPC_URL", "http://localhost:8545")
    clean_env.setenv("CHAIN_ID", "0x7a69")
    clean_env.setenv("AUTHORIZER_PRIVATE_KEY", AUTHORIZER_KEY)
    clean_env.setenv("SPONSOR_PRIVATE_KEY", SPONSOR_KEY)
    clean_env.setenv("DELEGATE_ADDRESS", DELEGATE)
    clean_env.setenv("POLL_INTERVAL", "0.5")
    clean_env.setenv("RECEIPT_TIMEOUT", "30")

    settings = load_settings()

    assert settings.chain_id == LOCALHOST_CHAIN_ID
    assert settings.authorizer_key == AUTHORIZER_KEY
    assert settings.sponsor_key == SPONSOR_KEY
    assert settings.delegate_address == DELEGATE
    assert settings.poll_interval == 0.5
    assert settings.timeout == 30.0


def test_env_file(clean_env, tmp_path):
    env_file = tmp_path / "node.env"
    env_file.write_text(
        "RPC_URL=https://sepolia.example\n"
        f"CHAIN_ID={SEPOLIA_CHAIN_ID}\n"
        f"AUTHORIZER_PRIVATE_KEY={AUTHORIZER_KEY}\n"
    )
    settings = load_settings(str(env_file))
    assert settings.rpc_url == "https://sepolia.example"
    assert settings.chain_id == SEPOLIA_CHAIN_ID
    assert settings.authorizer_key == AUTHORIZER_KEY


def test_environment_wins_over_env_file(clean_env, tmp_path):
    env_file = tmp_path / "node.env"
    env_file.write_text("RPC_URL=https://from-file.example\n")
    clean_env.setenv("RPC_URL", "https://from-env.example")
    assert load_settings(str(env_file)).rpc_url == "https://from-env.example"


def test_repr_hides_keys(clean_env):
    clean_env.setenv("RPC_URL", "http://localhost:8545")
    clean_env.setenv("AUTHORIZER_PRIVATE_KEY", AUTHORIZER_KEY)
    clean_env.setenv("SPONSOR_PRIVATE_KEY", SPONSOR_KEY)
    text = repr(load_settings())
    assert AUTHORIZER_KEY[2:] not in text
    assert SPONSOR_KEY[2:] not in text


def test_malformed_chain_id(clean_env):
    clean_env.setenv("RPC_URL", "http://localhost:8545")
    clean_env.setenv("CHAIN_ID", "sepolia")
    with pytest.raises(ValueError):
        load_settings()
