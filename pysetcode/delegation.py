"""Inspection of EIP-7702 delegation designators.

Once an authorization is applied, the authorizer's account code becomes
``0xef0100 || delegate_address`` (23 bytes).
"""

from dataclasses import dataclass
from typing import Optional

from eth_utils import to_checksum_address
from web3 import Web3

from .types import BytesLike, as_address, as_bytes

DELEGATION_PREFIX = bytes.fromhex("ef0100")
DELEGATION_CODE_LENGTH = len(DELEGATION_PREFIX) + 20


@dataclass(frozen=True)
class DelegationInfo:
    """Delegation state derived from an account's code."""

    is_delegated: bool
    raw_code: bytes
    delegated_address: Optional[str] = None

    @property
    def is_plain_eoa(self) -> bool:
        return not self.raw_code

    @property
    def has_other_code(self) -> bool:
        return bool(self.raw_code) and not self.is_delegated


def delegation_designator(delegate: BytesLike) -> bytes:
    """Account code installed for ``delegate``."""
    return DELEGATION_PREFIX + bytes(as_address(delegate))


def parse_delegation_code(code: BytesLike) -> DelegationInfo:
    code = as_bytes(code)
    if len(code) == DELEGATION_CODE_LENGTH and code.startswith(DELEGATION_PREFIX):
        return DelegationInfo(
            is_delegated=True,
            raw_code=code,
            delegated_address=to_checksum_address(code[len(DELEGATION_PREFIX) :]),
        )
    return DelegationInfo(is_delegated=False, raw_code=code)


def get_delegation(source, address: BytesLike) -> DelegationInfo:
    """Fetch and parse ``address``'s code; ``source`` is a Submitter or Web3."""
    address = as_address(address)
    if isinstance(source, Web3):
        code = source.eth.get_code(to_checksum_address(address))
    else:
        code = source.get_code(address)
    return parse_delegation_code(bytes(code))
