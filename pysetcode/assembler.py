"""Signing and serialization of set-code transactions.

The payer signs ``keccak256(0x04 || rlp(unsigned_fields))`` and the raw
transaction is ``0x04 || rlp(unsigned_fields + [y_parity, r, s])``.
"""

import logging

from eth_utils import keccak, to_checksum_address

from .authorization import load_account
from .codec import UINT64_BYTES, decode_list, decode_uint, encode_list
from .errors import EncodingError, Stage
from .models import (
    SIGNED_FIELD_COUNT,
    TRANSACTION_TYPE,
    AccessListItem,
    AuthorizationTuple,
    RawTransaction,
    Signature,
    SignedTransaction,
    UnsignedTransaction,
)

logger = logging.getLogger(__name__)


def assemble_and_sign(unsigned_tx: UnsignedTransaction, payer_key) -> RawTransaction:
    """
    Sign ``unsigned_tx`` with the payer key and serialize it.

    The payer is the authorizer itself for self-sponsored transactions, or
    a separate sponsor account; ``unsigned_tx.nonce`` must be the payer's.

    Raises:
        SigningError: the key is malformed
    """
    account = load_account(payer_key, stage=Stage.ASSEMBLY, role="payer")

    unsigned_rlp = encode_list(unsigned_tx.fields)
    digest = keccak(bytes([TRANSACTION_TYPE]) + unsigned_rlp)
    signed_msg = account.unsafe_sign_hash(digest)

    signed = SignedTransaction(
        transaction=unsigned_tx, signature=Signature.from_signed(signed_msg)
    )
    raw = RawTransaction(raw=signed.encode(), signing_hash=digest, signed=signed)

    logger.debug(
        "assembled set-code transaction payer=%s nonce=%d authorizations=%d hash=0x%s",
        account.address,
        unsigned_tx.nonce,
        len(unsigned_tx.authorization_list),
        raw.hash.hex(),
    )
    return raw


def _decode_authorization(item) -> AuthorizationTuple:
    if not isinstance(item, list) or len(item) != 6:
        raise EncodingError(
            "authorization tuple must have 6 elements",
            stage=Stage.ASSEMBLY,
            field="authorizationList",
        )
    chain_id, address, nonce, y_parity, r, s = item
    return AuthorizationTuple(
        chain_id=decode_uint(chain_id, field="chainId"),
        address=address,
        nonce=decode_uint(nonce, UINT64_BYTES, field="nonce"),
        y_parity=decode_uint(y_parity, 1, field="yParity"),
        r=decode_uint(r, field="r"),
        s=decode_uint(s, field="s"),
    )


def _decode_access_list_item(item) -> AccessListItem:
    if not isinstance(item, list) or len(item) != 2 or not isinstance(item[1], list):
        raise EncodingError(
            "access list entry must be [address, [keys]]",
            stage=Stage.ASSEMBLY,
            field="accessList",
        )
    return AccessListItem(address=item[0], storage_keys=tuple(item[1]))


def decode_raw_transaction(raw) -> SignedTransaction:
    """
    Parse a raw set-code transaction back into its logical fields.

    Raises:
        EncodingError: wrong type byte, field count, or non-canonical values
    """
    raw = bytes(raw)
    if not raw or raw[0] != TRANSACTION_TYPE:
        raise EncodingError(
            f"expected type byte {TRANSACTION_TYPE:#04x}", stage=Stage.ASSEMBLY
        )
    items = decode_list(raw[1:])
    if len(items) != SIGNED_FIELD_COUNT:
        raise EncodingError(
            f"expected {SIGNED_FIELD_COUNT} fields, got {len(items)}",
            stage=Stage.ASSEMBLY,
        )
    (
        chain_id,
        nonce,
        max_priority_fee_per_gas,
        max_fee_per_gas,
        gas_limit,
        to,
        value,
        data,
        access_list,
        authorization_list,
        y_parity,
        r,
        s,
    ) = items
    if not isinstance(access_list, list) or not isinstance(authorization_list, list):
        raise EncodingError(
            "accessList and authorizationList must be lists", stage=Stage.ASSEMBLY
        )

    tx = UnsignedTransaction(
        chain_id=decode_uint(chain_id, field="chainId"),
        nonce=decode_uint(nonce, UINT64_BYTES, field="nonce"),
        max_priority_fee_per_gas=decode_uint(
            max_priority_fee_per_gas, field="maxPriorityFeePerGas"
        ),
        max_fee_per_gas=decode_uint(max_fee_per_gas, field="maxFeePerGas"),
        gas_limit=decode_uint(gas_limit, UINT64_BYTES, field="gasLimit"),
        to=to,
        value=decode_uint(value, field="value"),
        data=data,
        access_list=tuple(_decode_access_list_item(i) for i in access_list),
        authorization_list=tuple(_decode_authorization(a) for a in authorization_list),
    )
    signature = Signature(
        y_parity=decode_uint(y_parity, 1, field="yParity"),
        r=decode_uint(r, field="r"),
        s=decode_uint(s, field="s"),
    )
    return SignedTransaction(transaction=tx, signature=signature)


class RawTransactionAssembler:
    """Assembler bound to one payer key (authorizer or sponsor)."""

    def __init__(self, payer_key):
        self._account = load_account(payer_key, stage=Stage.ASSEMBLY, role="payer")

    @property
    def address(self) -> str:
        return to_checksum_address(self._account.address)

    def assemble(self, unsigned_tx: UnsignedTransaction) -> RawTransaction:
        return assemble_and_sign(unsigned_tx, self._account.key)

    def __repr__(self) -> str:
        return f"RawTransactionAssembler(address={self.address})"
