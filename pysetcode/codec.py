"""Canonical binary encoding for set-code transactions.

All integers travel as minimal big-endian byte strings (no leading zero
byte, zero is the empty string) inside an RLP list. Every digest and
signature downstream depends on this module producing the canonical form.
"""

from typing import Optional, Sequence, Union

import rlp
from rlp.exceptions import DecodingError, DeserializationError, SerializationError
from rlp.sedes import big_endian_int

from .errors import EncodingError

UINT256_BYTES = 32
UINT64_BYTES = 8
ADDRESS_BYTES = 20

Encodable = Union[bytes, Sequence["Encodable"]]


def encode_uint(
    n: int, max_bytes: int = UINT256_BYTES, *, field: Optional[str] = None
) -> bytes:
    """Minimal big-endian encoding of ``n``; ``encode_uint(0) == b""``."""
    if isinstance(n, bool) or not isinstance(n, int):
        raise EncodingError(f"expected int, got {type(n).__name__}", field=field)
    try:
        encoded = big_endian_int.serialize(n)
    except SerializationError as e:
        raise EncodingError(str(e), field=field) from e
    if len(encoded) > max_bytes:
        raise EncodingError(
            f"value needs {len(encoded)} bytes, limit is {max_bytes}", field=field
        )
    return encoded


def decode_uint(
    data: bytes, max_bytes: int = UINT256_BYTES, *, field: Optional[str] = None
) -> int:
    """Inverse of :func:`encode_uint`; rejects non-canonical input."""
    if not isinstance(data, (bytes, bytearray)):
        raise EncodingError(f"expected bytes, got {type(data).__name__}", field=field)
    if len(data) > max_bytes:
        raise EncodingError(
            f"{len(data)} bytes exceeds limit of {max_bytes}", field=field
        )
    try:
        return big_endian_int.deserialize(bytes(data))
    except DeserializationError as e:
        raise EncodingError("leading zero byte in integer", field=field) from e


def encode_address(address: bytes, *, field: str = "address") -> bytes:
    if not isinstance(address, (bytes, bytearray)):
        raise EncodingError(
            f"expected bytes, got {type(address).__name__}", field=field
        )
    if len(address) != ADDRESS_BYTES:
        raise EncodingError(
            f"address must be {ADDRESS_BYTES} bytes, got {len(address)}", field=field
        )
    return bytes(address)


def _check_items(items, path: str) -> None:
    for i, item in enumerate(items):
        if isinstance(item, (bytes, bytearray)):
            continue
        if isinstance(item, (list, tuple)):
            _check_items(item, f"{path}[{i}]")
            continue
        raise EncodingError(
            f"cannot encode {type(item).__name__}; encode integers with encode_uint first",
            field=f"{path}[{i}]",
        )


def encode_list(items: Sequence[Encodable]) -> bytes:
    """RLP-encode a nested sequence of byte strings."""
    if not isinstance(items, (list, tuple)):
        raise EncodingError(f"expected a list, got {type(items).__name__}")
    _check_items(items, "item")
    return rlp.encode([_as_list(i) for i in items])


def _as_list(item):
    if isinstance(item, (list, tuple)):
        return [_as_list(i) for i in item]
    return bytes(item)


def decode_list(data: bytes) -> list:
    """Decode an RLP payload produced by :func:`encode_list`."""
    try:
        decoded = rlp.decode(bytes(data))
    except DecodingError as e:
        raise EncodingError(f"malformed RLP payload: {e}") from e
    if not isinstance(decoded, list):
        raise EncodingError("payload is not an RLP list")
    return decoded
