"""EIP-7702 authorization signing.

An authorization is signed over::

    keccak256(0x05 || rlp([chain_id, address, nonce]))

and travels in the transaction as ``[chain_id, address, nonce, y_parity, r, s]``.
"""

import logging

from eth_account import Account
from eth_keys.exceptions import ValidationError
from eth_utils import keccak, to_checksum_address

from .codec import UINT64_BYTES, encode_address, encode_list, encode_uint
from .errors import EncodingError, InvalidAddress, SigningError, Stage
from .models import (
    AUTHORIZATION_MAGIC,
    UINT64_MAX,
    UINT256_MAX,
    AuthorizationTuple,
    Signature,
)
from .types import Address, BytesLike, as_address, is_zero_address

logger = logging.getLogger(__name__)


def load_account(private_key, *, stage: Stage, role: str = "signer"):
    """Load an eth_account LocalAccount, translating key errors to SigningError."""
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError, ValidationError) as e:
        # The exception text may echo key material; keep only its type.
        raise SigningError(
            f"malformed {role} private key ({type(e).__name__})",
            stage=stage,
            field=f"{role}_key",
        ) from None


def _delegate_bytes(delegate_address: BytesLike) -> Address:
    try:
        address = as_address(delegate_address)
    except (ValueError, TypeError) as e:
        raise InvalidAddress(
            str(e), stage=Stage.AUTHORIZATION, field="address"
        ) from e
    if is_zero_address(address):
        raise InvalidAddress(
            "delegate address must not be the zero address",
            stage=Stage.AUTHORIZATION,
            field="address",
        )
    return address


def _check_uint(value, limit: int, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(
            f"expected int, got {type(value).__name__}",
            stage=Stage.AUTHORIZATION,
            field=field,
        )
    if not 0 <= value <= limit:
        raise EncodingError(
            f"{value} out of range [0, {limit}]",
            stage=Stage.AUTHORIZATION,
            field=field,
        )


def authorization_digest(chain_id: int, address: BytesLike, nonce: int) -> bytes:
    """Digest the authority signs for (chain_id, address, nonce)."""
    _check_uint(chain_id, UINT256_MAX, "chainId")
    _check_uint(nonce, UINT64_MAX, "nonce")
    content = encode_list(
        [
            encode_uint(chain_id, field="chainId"),
            encode_address(as_address(address)),
            encode_uint(nonce, UINT64_BYTES, field="nonce"),
        ]
    )
    return keccak(bytes([AUTHORIZATION_MAGIC]) + content)


def sign_authorization(
    signer_key,
    chain_id: int,
    delegate_address: BytesLike,
    nonce: int,
) -> AuthorizationTuple:
    """
    Sign an authorization delegating the signer's EOA to ``delegate_address``.

    Signing is deterministic (RFC 6979): identical inputs produce an
    identical tuple.

    Args:
        signer_key: Authorizer private key (hex string or bytes)
        chain_id: Chain the authorization is valid on (0 = any chain)
        delegate_address: Contract whose code the EOA adopts
        nonce: Authorizer account nonce at the time the tuple is applied

    Returns:
        Signed AuthorizationTuple

    Raises:
        InvalidAddress: delegate is the zero address or not 20 bytes
        EncodingError: chain_id or nonce is not an int in range
        SigningError: the key is malformed
    """
    delegate = _delegate_bytes(delegate_address)
    _check_uint(chain_id, UINT256_MAX, "chainId")
    _check_uint(nonce, UINT64_MAX, "nonce")
    account = load_account(signer_key, stage=Stage.AUTHORIZATION, role="authorizer")

    digest = authorization_digest(chain_id, delegate, nonce)
    signed = account.unsafe_sign_hash(digest)
    sig = Signature.from_signed(signed)

    logger.debug(
        "signed authorization authority=%s delegate=%s chain_id=%d nonce=%d digest=0x%s",
        account.address,
        to_checksum_address(delegate),
        chain_id,
        nonce,
        digest.hex(),
    )

    return AuthorizationTuple(
        chain_id=chain_id,
        address=delegate,
        nonce=nonce,
        y_parity=sig.y_parity,
        r=sig.r,
        s=sig.s,
    )


def recover_authority(authorization: AuthorizationTuple) -> Address:
    """Recover the EOA that signed ``authorization``."""
    return authorization.recover_authority()


class AuthorizationSigner:
    """
    Authorization signer bound to one authorizer key.

    The key is validated up front and only the derived address is exposed.
    """

    def __init__(self, private_key):
        self._account = load_account(
            private_key, stage=Stage.AUTHORIZATION, role="authorizer"
        )

    @property
    def address(self) -> str:
        return self._account.address

    def sign(
        self, chain_id: int, delegate_address: BytesLike, nonce: int
    ) -> AuthorizationTuple:
        return sign_authorization(self._account.key, chain_id, delegate_address, nonce)

    def __repr__(self) -> str:
        return f"AuthorizationSigner(address={self.address})"
