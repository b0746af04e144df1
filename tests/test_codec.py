"""Tests for canonical integer and list encoding."""

import pytest
import rlp
from hypothesis import given
from hypothesis import strategies as st

from pysetcode import EncodingError, decode_list, decode_uint, encode_list, encode_uint
from pysetcode.codec import encode_address

UINT256_MAX = 2**256 - 1


class TestEncodeUint:
    """Test minimal big-endian integer encoding."""

    def test_zero_is_empty(self):
        assert encode_uint(0) == b""

    @pytest.mark.parametrize(
        "n,expected",
        [
            (1, b"\x01"),
            (0x7F, b"\x7f"),
            (0xFF, b"\xff"),
            (0x100, b"\x01\x00"),
            (0xFFFF, b"\xff\xff"),
            (0x10000, b"\x01\x00\x00"),
            (2**64 - 1, b"\xff" * 8),
            (2**64, b"\x01" + b"\x00" * 8),
            (UINT256_MAX, b"\xff" * 32),
        ],
    )
    def test_boundary_values(self, n, expected):
        assert encode_uint(n) == expected

    def test_sepolia_chain_id(self):
        assert encode_uint(11155111) == bytes.fromhex("aa36a7")

    def test_rejects_wider_than_uint256(self):
        with pytest.raises(EncodingError, match="limit is 32"):
            encode_uint(2**256)

    def test_custom_width(self):
        assert encode_uint(2**64 - 1, 8) == b"\xff" * 8
        with pytest.raises(EncodingError):
            encode_uint(2**64, 8)

    def test_rejects_negative(self):
        with pytest.raises(EncodingError):
            encode_uint(-1)

    def test_rejects_non_int(self):
        with pytest.raises(EncodingError, match="expected int"):
            encode_uint("5")
        with pytest.raises(EncodingError, match="expected int"):
            encode_uint(True)

    def test_error_names_field(self):
        with pytest.raises(EncodingError) as exc_info:
            encode_uint(2**256, field="maxFeePerGas")
        assert exc_info.value.field == "maxFeePerGas"
        assert "maxFeePerGas" in str(exc_info.value)

    @given(st.integers(min_value=1, max_value=UINT256_MAX))
    def test_no_leading_zero_byte(self, n):
        encoded = encode_uint(n)
        assert encoded[0] != 0
        assert len(encoded) == (n.bit_length() + 7) // 8

    @given(st.integers(min_value=0, max_value=UINT256_MAX))
    def test_round_trip(self, n):
        assert decode_uint(encode_uint(n)) == n

    @given(st.integers(min_value=0, max_value=UINT256_MAX))
    def test_matches_rlp_integer_encoding(self, n):
        assert encode_list([encode_uint(n)]) == rlp.encode([n])


class TestDecodeUint:
    """Test decoding rejects non-canonical input."""

    def test_empty_is_zero(self):
        assert decode_uint(b"") == 0

    def test_rejects_leading_zero(self):
        with pytest.raises(EncodingError, match="leading zero"):
            decode_uint(b"\x00\x01")

    def test_rejects_oversized(self):
        with pytest.raises(EncodingError, match="exceeds limit"):
            decode_uint(b"\x01" * 33)


class TestEncodeAddress:
    def test_accepts_20_bytes(self):
        assert encode_address(b"\x11" * 20) == b"\x11" * 20

    def test_rejects_wrong_length(self):
        with pytest.raises(EncodingError, match="20 bytes"):
            encode_address(b"\x11" * 19)


class TestEncodeList:
    """Test RLP list encoding."""

    def test_empty_list(self):
        assert encode_list([]) == b"\xc0"

    def test_nested_lists(self):
        items = [b"\x01", [b"", [b"\x02\x03"]], b"dog"]
        assert encode_list(items) == rlp.encode(items)

    def test_tuples_encode_as_lists(self):
        assert encode_list((b"\x01", (b"\x02",))) == rlp.encode([b"\x01", [b"\x02"]])

    def test_rejects_raw_int(self):
        with pytest.raises(EncodingError, match="encode_uint") as exc_info:
            encode_list([b"\x01", [5]])
        assert exc_info.value.field == "item[1][0]"

    def test_rejects_non_list(self):
        with pytest.raises(EncodingError, match="expected a list"):
            encode_list(b"\x01")

    def test_decode_round_trip(self):
        items = [b"\x04", [b"", b"\xff" * 32], []]
        assert decode_list(encode_list(items)) == items

    def test_decode_rejects_garbage(self):
        with pytest.raises(EncodingError, match="malformed"):
            decode_list(b"\xf8")

    def test_decode_rejects_non_list_payload(self):
        with pytest.raises(EncodingError, match="not an RLP list"):
            decode_list(rlp.encode(b"dog"))
