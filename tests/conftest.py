"""Shared fixtures for pysetcode tests."""

import pytest
from eth_account import Account

from pysetcode import Call, as_address, sign_authorization

AUTHORIZER_KEY = "0x7eafbf9699b30c9ed8e3d6bbae57dd4f047544fde34d4c982dd591c2bee39ad0"
SPONSOR_KEY = "0x" + "22" * 32

SEPOLIA = 11155111
DELEGATE = "0x" + "aa" * 18 + "1111"
TOKEN = "0xF0109fC8DF283027b6285cc889F5aA624EaC1F55"
RECEIVER = "0x" + "bb" * 20


@pytest.fixture
def authorizer():
    return Account.from_key(AUTHORIZER_KEY)


@pytest.fixture
def sponsor():
    return Account.from_key(SPONSOR_KEY)


@pytest.fixture
def authorization():
    return sign_authorization(AUTHORIZER_KEY, SEPOLIA, DELEGATE, 5)


@pytest.fixture
def transfer_call():
    return Call.create(target=TOKEN, value=0, data="0xa9059cbb" + "00" * 64)


@pytest.fixture
def tx_fields(authorizer):
    return {
        "chainId": SEPOLIA,
        "nonce": 4,
        "maxPriorityFeePerGas": 2_000_000_000,
        "maxFeePerGas": 20_000_000_000,
        "gasLimit": 1_000_000,
        "to": as_address(authorizer.address),
        "value": 0,
        "data": b"\x12\x34",
        "accessList": (),
    }
