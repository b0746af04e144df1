"""Type definitions and coercion helpers for set-code transactions.

These converters accept hex strings or raw bytes and are used by the
record constructors in ``models`` and by the builder.
"""

from typing import NewType, Optional, Union

from eth_utils import is_hex, to_bytes

Address = NewType("Address", bytes)
Hash32 = NewType("Hash32", bytes)

BytesLike = Union[bytes, bytearray, memoryview, str]

ZERO_ADDRESS = Address(b"\x00" * 20)


def _raw(value: BytesLike) -> bytes:
    if isinstance(value, str):
        if value == "" or value == "0x":
            return b""
        if not is_hex(value):
            raise ValueError(f"not a hex string: {value!r}")
        return to_bytes(hexstr=value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"expected str, bytes or bytearray, got {type(value).__name__}")


def as_bytes(value: BytesLike) -> bytes:
    """Convert hex string, bytes, bytearray, or memoryview to bytes."""
    return _raw(value)


def as_address(value: BytesLike) -> Address:
    """Convert hex string or bytes to a validated 20-byte address."""
    b = _raw(value)
    if len(b) != 20:
        raise ValueError(f"address must be 20 bytes, got {len(b)}")
    return Address(b)


def as_optional_address(value: Optional[BytesLike]) -> Optional[Address]:
    """Convert to Address, treating empty/None as None."""
    if value is None:
        return None
    b = _raw(value)
    if b == b"":
        return None
    return as_address(b)


def as_hash32(value: BytesLike) -> Hash32:
    """Convert hex string or bytes to a validated 32-byte hash."""
    b = _raw(value)
    if len(b) != 32:
        raise ValueError(f"hash32 must be 32 bytes, got {len(b)}")
    return Hash32(b)


def is_zero_address(value: bytes) -> bool:
    return bytes(value) == ZERO_ADDRESS
