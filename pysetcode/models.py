"""Strongly-typed records for EIP-7702 set-code transactions."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from eth_account import Account
from eth_utils import keccak, to_checksum_address

from .codec import (
    UINT64_BYTES,
    encode_address,
    encode_list,
    encode_uint,
)
from .errors import (
    EncodingError,
    InvalidAddress,
    InvalidTransaction,
    SigningError,
    Stage,
)
from .types import (
    Address,
    BytesLike,
    Hash32,
    as_address,
    as_bytes,
    as_hash32,
    is_zero_address,
)

TRANSACTION_TYPE = 0x04
AUTHORIZATION_MAGIC = 0x05

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

UINT256_MAX = 2**256 - 1
UINT64_MAX = 2**64 - 1


@dataclass(frozen=True)
class Signature:
    """secp256k1 signature with a 0/1 recovery parity."""

    y_parity: int
    r: int
    s: int

    def __post_init__(self):
        if self.y_parity not in (0, 1):
            raise SigningError(f"y_parity must be 0 or 1, got {self.y_parity}")
        if not 0 < self.r < SECP256K1_N:
            raise SigningError("signature r must be in range [1, n)")
        if not 0 < self.s < SECP256K1_N:
            raise SigningError("signature s must be in range [1, n)")
        if self.s > SECP256K1_HALF_N:
            raise SigningError("signature s must be low-s (<= n/2)")

    @classmethod
    def from_signed(cls, signed) -> "Signature":
        """Build from an eth_account SignedMessage (v is 27/28 or 0/1)."""
        v = signed.v
        return cls(y_parity=v - 27 if v >= 27 else v, r=signed.r, s=signed.s)

    def as_rlp_list(self) -> list:
        return [
            encode_uint(self.y_parity, field="yParity"),
            encode_uint(self.r, field="r"),
            encode_uint(self.s, field="s"),
        ]

    def to_bytes(self) -> bytes:
        """65-byte r || s || yParity form used for key recovery."""
        return (
            self.r.to_bytes(32, "big")
            + self.s.to_bytes(32, "big")
            + bytes([self.y_parity])
        )

    def recover(self, msg_hash: bytes) -> Address:
        """Recover the signing address for a 32-byte hash."""
        return as_address(Account._recover_hash(msg_hash, signature=self.to_bytes()))


@dataclass(frozen=True)
class AuthorizationTuple:
    """
    Signed EIP-7702 authorization.

    The signer's EOA delegates its code to ``address`` while its account
    nonce equals ``nonce`` on chain ``chain_id`` (0 means any chain).
    """

    chain_id: int
    address: Address
    nonce: int
    y_parity: int
    r: int
    s: int

    def __post_init__(self):
        if not 0 <= self.chain_id <= UINT256_MAX:
            raise EncodingError(
                "chain_id out of range", stage=Stage.AUTHORIZATION, field="chainId"
            )
        if not 0 <= self.nonce <= UINT64_MAX:
            raise EncodingError(
                "nonce out of range", stage=Stage.AUTHORIZATION, field="nonce"
            )
        if len(bytes(self.address)) != 20:
            raise InvalidAddress(
                "delegate address must be 20 bytes",
                stage=Stage.AUTHORIZATION,
                field="address",
            )
        if is_zero_address(self.address):
            raise InvalidAddress(
                "delegate address must not be the zero address",
                stage=Stage.AUTHORIZATION,
                field="address",
            )
        Signature(y_parity=self.y_parity, r=self.r, s=self.s)

    @property
    def signature(self) -> Signature:
        return Signature(y_parity=self.y_parity, r=self.r, s=self.s)

    @property
    def checksum_address(self) -> str:
        return to_checksum_address(self.address)

    def digest(self) -> bytes:
        """keccak256(0x05 || rlp([chain_id, address, nonce]))"""
        content = encode_list(
            [
                encode_uint(self.chain_id, field="chainId"),
                encode_address(self.address),
                encode_uint(self.nonce, UINT64_BYTES, field="nonce"),
            ]
        )
        return keccak(bytes([AUTHORIZATION_MAGIC]) + content)

    def recover_authority(self) -> Address:
        """Address of the EOA that signed this authorization."""
        return self.signature.recover(self.digest())

    def as_rlp_list(self) -> list:
        """[chainId, address, nonce, yParity, r, s]"""
        return [
            encode_uint(self.chain_id, field="chainId"),
            encode_address(self.address),
            encode_uint(self.nonce, UINT64_BYTES, field="nonce"),
            *self.signature.as_rlp_list(),
        ]

    def as_dict(self) -> dict:
        """JSON-RPC style representation."""
        return {
            "chainId": self.chain_id,
            "address": self.checksum_address,
            "nonce": self.nonce,
            "yParity": self.y_parity,
            "r": hex(self.r),
            "s": hex(self.s),
        }


@dataclass(frozen=True)
class Call:
    """Single sub-call passed to the delegate contract."""

    target: Address
    value: int
    data: bytes

    def __post_init__(self):
        if self.value < 0:
            raise ValueError("call.value must be >= 0")
        if self.value > UINT256_MAX:
            raise EncodingError("call.value exceeds uint256", field="value")
        if len(bytes(self.target)) != 20:
            raise InvalidAddress("call target must be 20 bytes", field="target")
        if is_zero_address(self.target):
            raise InvalidAddress(
                "call target must not be the zero address", field="target"
            )

    def as_abi_tuple(self) -> tuple:
        return (to_checksum_address(self.target), self.value, bytes(self.data))

    @classmethod
    def create(
        cls,
        target: BytesLike,
        value: int = 0,
        data: BytesLike = b"",
    ) -> "Call":
        """Create a Call with automatic type coercion."""
        return cls(target=as_address(target), value=value, data=as_bytes(data))


@dataclass(frozen=True)
class AccessListItem:
    """Single entry in an EIP-2930 access list."""

    address: Address
    storage_keys: tuple[Hash32, ...] = ()

    def __post_init__(self):
        if len(bytes(self.address)) != 20:
            raise InvalidTransaction(
                "access list address must be 20 bytes", field="accessList"
            )
        for key in self.storage_keys:
            if len(bytes(key)) != 32:
                raise InvalidTransaction(
                    "storage key must be 32 bytes", field="accessList"
                )

    def as_rlp_list(self) -> list:
        return [bytes(self.address), [bytes(k) for k in self.storage_keys]]

    @classmethod
    def create(
        cls,
        address: BytesLike,
        storage_keys: tuple[BytesLike, ...] = (),
    ) -> "AccessListItem":
        """Create an AccessListItem with automatic type coercion."""
        return cls(
            address=as_address(address),
            storage_keys=tuple(as_hash32(k) for k in storage_keys),
        )


# camelCase wire names, in field order
TRANSACTION_FIELD_NAMES = (
    "chainId",
    "nonce",
    "maxPriorityFeePerGas",
    "maxFeePerGas",
    "gasLimit",
    "to",
    "value",
    "data",
    "accessList",
    "authorizationList",
)


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    Set-code transaction (type 0x04) before the outer signature.

    Field order follows the wire format:
    [chainId, nonce, maxPriorityFeePerGas, maxFeePerGas, gasLimit,
     to, value, data, accessList, authorizationList]
    """

    chain_id: int
    nonce: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int
    gas_limit: int
    to: Address
    value: int = 0
    data: bytes = b""
    access_list: tuple[AccessListItem, ...] = ()
    authorization_list: tuple[AuthorizationTuple, ...] = ()

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for name in (
            "chain_id",
            "nonce",
            "max_priority_fee_per_gas",
            "max_fee_per_gas",
            "gas_limit",
            "value",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidTransaction(f"{name} must be an int", field=name)
            if value < 0:
                raise InvalidTransaction(f"{name} must be >= 0", field=name)
            if value > UINT256_MAX:
                raise InvalidTransaction(f"{name} exceeds uint256", field=name)
        if self.chain_id == 0:
            raise InvalidTransaction("chain_id must be > 0", field="chain_id")
        if self.nonce > UINT64_MAX:
            raise InvalidTransaction("nonce exceeds uint64", field="nonce")
        if self.gas_limit <= 0:
            raise InvalidTransaction("gas_limit must be > 0", field="gas_limit")
        if self.gas_limit > UINT64_MAX:
            raise InvalidTransaction("gas_limit exceeds uint64", field="gas_limit")
        if self.max_priority_fee_per_gas > self.max_fee_per_gas:
            raise InvalidTransaction(
                "max_priority_fee_per_gas cannot exceed max_fee_per_gas",
                field="max_priority_fee_per_gas",
            )
        if not isinstance(self.to, (bytes, bytearray)) or len(self.to) != 20:
            raise InvalidAddress(
                "to must be a 20-byte address", stage=Stage.BUILD, field="to"
            )
        for item in self.access_list:
            if not isinstance(item, AccessListItem):
                raise InvalidTransaction(
                    "access list entries must be AccessListItem", field="accessList"
                )
        for auth in self.authorization_list:
            if not isinstance(auth, AuthorizationTuple):
                raise InvalidTransaction(
                    "authorization list entries must be AuthorizationTuple",
                    field="authorizationList",
                )

    @property
    def fields(self) -> list:
        """Canonically encoded field list, ready for RLP."""
        return [
            encode_uint(self.chain_id, field="chainId"),
            encode_uint(self.nonce, UINT64_BYTES, field="nonce"),
            encode_uint(self.max_priority_fee_per_gas, field="maxPriorityFeePerGas"),
            encode_uint(self.max_fee_per_gas, field="maxFeePerGas"),
            encode_uint(self.gas_limit, UINT64_BYTES, field="gasLimit"),
            encode_address(self.to, field="to"),
            encode_uint(self.value, field="value"),
            bytes(self.data),
            [a.as_rlp_list() for a in self.access_list],
            [a.as_rlp_list() for a in self.authorization_list],
        ]

    def signing_hash(self) -> bytes:
        """keccak256(0x04 || rlp(fields))"""
        return keccak(bytes([TRANSACTION_TYPE]) + encode_list(self.fields))

    @classmethod
    def from_dict(cls, tx: Mapping[str, Any]) -> "UnsignedTransaction":
        """
        Create from a camelCase field mapping.

        Every key in ``TRANSACTION_FIELD_NAMES`` is required and no other key
        is accepted. ``accessList`` entries may be AccessListItem or
        ``{"address", "storageKeys"}`` mappings.
        """
        unknown = sorted(set(tx) - set(TRANSACTION_FIELD_NAMES))
        if unknown:
            raise InvalidTransaction(
                f"unknown transaction fields: {', '.join(unknown)}", field=unknown[0]
            )
        missing = [k for k in TRANSACTION_FIELD_NAMES if k not in tx]
        if missing:
            raise InvalidTransaction(
                f"missing transaction fields: {', '.join(missing)}", field=missing[0]
            )

        try:
            to = as_address(tx["to"])
        except (ValueError, TypeError) as e:
            raise InvalidAddress(str(e), stage=Stage.BUILD, field="to") from e

        access_list = tuple(
            item
            if isinstance(item, AccessListItem)
            else AccessListItem.create(
                address=item["address"],
                storage_keys=tuple(item.get("storageKeys", ())),
            )
            for item in tx["accessList"]
        )
        return cls(
            chain_id=tx["chainId"],
            nonce=tx["nonce"],
            max_priority_fee_per_gas=tx["maxPriorityFeePerGas"],
            max_fee_per_gas=tx["maxFeePerGas"],
            gas_limit=tx["gasLimit"],
            to=to,
            value=tx["value"],
            data=as_bytes(tx["data"]),
            access_list=access_list,
            authorization_list=tuple(tx["authorizationList"]),
        )

    def as_dict(self) -> dict:
        return {
            "chainId": self.chain_id,
            "nonce": self.nonce,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
            "maxFeePerGas": self.max_fee_per_gas,
            "gasLimit": self.gas_limit,
            "to": to_checksum_address(self.to),
            "value": self.value,
            "data": "0x" + bytes(self.data).hex(),
            "accessList": [
                {
                    "address": to_checksum_address(item.address),
                    "storageKeys": ["0x" + bytes(k).hex() for k in item.storage_keys],
                }
                for item in self.access_list
            ],
            "authorizationList": [a.as_dict() for a in self.authorization_list],
        }


@dataclass(frozen=True)
class SignedTransaction:
    """UnsignedTransaction plus the payer's outer signature."""

    transaction: UnsignedTransaction
    signature: Signature

    @property
    def fields(self) -> list:
        return self.transaction.fields + self.signature.as_rlp_list()

    def encode(self) -> bytes:
        """0x04 || rlp([13 fields])"""
        return bytes([TRANSACTION_TYPE]) + encode_list(self.fields)

    def sender(self) -> Address:
        return self.signature.recover(self.transaction.signing_hash())


@dataclass(frozen=True)
class RawTransaction:
    """Serialized, signed set-code transaction ready for broadcast."""

    raw: bytes
    signing_hash: bytes
    signed: Optional[SignedTransaction] = None

    def __post_init__(self):
        if not self.raw or self.raw[0] != TRANSACTION_TYPE:
            raise EncodingError(
                f"raw transaction must start with type byte {TRANSACTION_TYPE:#04x}",
                stage=Stage.ASSEMBLY,
            )

    @property
    def hash(self) -> bytes:
        """Transaction hash as the network reports it."""
        return keccak(self.raw)

    def hex(self) -> str:
        return "0x" + self.raw.hex()

    def sender(self) -> Address:
        """Address that signed and pays for the transaction."""
        if self.signed is None:
            raise EncodingError(
                "sender unknown; decode the raw transaction first",
                stage=Stage.ASSEMBLY,
            )
        return self.signed.sender()

    def __bytes__(self) -> bytes:
        return self.raw

    def __len__(self) -> int:
        return len(self.raw)


SIGNED_FIELD_COUNT = len(TRANSACTION_FIELD_NAMES) + 3
