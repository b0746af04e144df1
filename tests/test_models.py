"""Tests for the strongly-typed models."""

import pytest

from pysetcode import (
    AccessListItem,
    AuthorizationTuple,
    Call,
    EncodingError,
    InvalidAddress,
    InvalidTransaction,
    Signature,
    SigningError,
    UnsignedTransaction,
    as_address,
    as_bytes,
    as_hash32,
)
from pysetcode.models import SECP256K1_HALF_N, SECP256K1_N

from .conftest import DELEGATE, SEPOLIA, TOKEN


class TestTypes:
    """Test type coercion helpers."""

    def test_as_address_from_hex(self):
        addr = as_address("0xF0109fC8DF283027b6285cc889F5aA624EaC1F55")
        assert len(addr) == 20
        assert isinstance(addr, bytes)

    def test_as_address_from_bytes(self):
        raw = bytes.fromhex("F0109fC8DF283027b6285cc889F5aA624EaC1F55")
        assert as_address(raw) == raw

    def test_as_address_rejects_empty(self):
        with pytest.raises(ValueError, match="20 bytes"):
            as_address("")

    def test_as_address_invalid_length(self):
        with pytest.raises(ValueError, match="20 bytes"):
            as_address("0x1234")

    def test_as_address_rejects_non_hex(self):
        with pytest.raises(ValueError, match="not a hex string"):
            as_address("0xzz")

    def test_as_hash32_invalid_length(self):
        with pytest.raises(ValueError, match="32 bytes"):
            as_hash32("0x1234")

    def test_as_bytes_empty(self):
        assert as_bytes("0x") == b""
        assert as_bytes("") == b""

    def test_as_bytes_rejects_int(self):
        with pytest.raises(TypeError, match="expected str, bytes"):
            as_bytes(20)


class TestSignature:
    """Test Signature validation."""

    def test_valid(self):
        sig = Signature(y_parity=1, r=1, s=1)
        assert sig.as_rlp_list() == [b"\x01", b"\x01", b"\x01"]

    def test_zero_parity_encodes_empty(self):
        assert Signature(y_parity=0, r=1, s=1).as_rlp_list()[0] == b""

    def test_rejects_legacy_v(self):
        with pytest.raises(SigningError, match="y_parity must be 0 or 1"):
            Signature(y_parity=27, r=1, s=1)

    def test_rejects_zero_r(self):
        with pytest.raises(SigningError, match="r must be in range"):
            Signature(y_parity=0, r=0, s=1)

    def test_rejects_r_at_curve_order(self):
        with pytest.raises(SigningError, match="r must be in range"):
            Signature(y_parity=0, r=SECP256K1_N, s=1)

    def test_rejects_high_s(self):
        with pytest.raises(SigningError, match="low-s"):
            Signature(y_parity=0, r=1, s=SECP256K1_HALF_N + 1)

    def test_to_bytes(self):
        raw = Signature(y_parity=1, r=2, s=3).to_bytes()
        assert len(raw) == 65
        assert raw[64] == 1

    def test_from_signed_normalizes_v(self):
        class Signed:
            v, r, s = 28, 5, 6

        assert Signature.from_signed(Signed) == Signature(y_parity=1, r=5, s=6)


class TestAuthorizationTuple:
    def test_rejects_zero_address(self):
        with pytest.raises(InvalidAddress, match="zero address"):
            AuthorizationTuple(
                chain_id=1, address=b"\x00" * 20, nonce=0, y_parity=0, r=1, s=1
            )

    def test_rejects_nonce_above_uint64(self):
        with pytest.raises(EncodingError) as exc_info:
            AuthorizationTuple(
                chain_id=1,
                address=as_address(DELEGATE),
                nonce=2**64,
                y_parity=0,
                r=1,
                s=1,
            )
        assert exc_info.value.field == "nonce"

    def test_chain_id_zero_allowed(self):
        auth = AuthorizationTuple(
            chain_id=0, address=as_address(DELEGATE), nonce=0, y_parity=0, r=1, s=1
        )
        assert auth.as_rlp_list()[0] == b""

    def test_as_dict(self):
        auth = AuthorizationTuple(
            chain_id=SEPOLIA,
            address=as_address(DELEGATE),
            nonce=5,
            y_parity=1,
            r=0xAB,
            s=0xCD,
        )
        assert auth.as_dict() == {
            "chainId": SEPOLIA,
            "address": auth.checksum_address,
            "nonce": 5,
            "yParity": 1,
            "r": "0xab",
            "s": "0xcd",
        }


class TestCall:
    """Test Call dataclass."""

    def test_create_call(self):
        call = Call.create(target=TOKEN, value=1000, data="0xabcd")
        assert len(call.target) == 20
        assert call.value == 1000
        assert call.data == bytes.fromhex("abcd")

    def test_negative_value(self):
        with pytest.raises(ValueError, match="value must be >= 0"):
            Call.create(target=TOKEN, value=-1)

    def test_zero_target(self):
        with pytest.raises(InvalidAddress, match="zero address"):
            Call.create(target="0x" + "00" * 20)


class TestAccessListItem:
    def test_create(self):
        item = AccessListItem.create(address=TOKEN, storage_keys=("0x" + "ab" * 32,))
        assert item.as_rlp_list() == [as_address(TOKEN), [b"\xab" * 32]]

    def test_rejects_short_key(self):
        with pytest.raises(InvalidTransaction, match="storage key"):
            AccessListItem(address=as_address(TOKEN), storage_keys=(b"\x01",))


def _tx(**overrides):
    fields = dict(
        chain_id=SEPOLIA,
        nonce=0,
        max_priority_fee_per_gas=1,
        max_fee_per_gas=2,
        gas_limit=21_000,
        to=as_address(TOKEN),
    )
    fields.update(overrides)
    return UnsignedTransaction(**fields)


class TestUnsignedTransaction:
    """Test construction-time validation of the unsigned transaction."""

    def test_valid_minimal(self):
        tx = _tx()
        assert len(tx.fields) == 10

    def test_fields_are_canonical(self):
        tx = _tx(nonce=0, value=0)
        fields = tx.fields
        assert fields[1] == b""
        assert fields[6] == b""
        assert fields[8] == []
        assert fields[9] == []

    def test_zero_gas_limit(self):
        with pytest.raises(InvalidTransaction, match="gas_limit must be > 0") as e:
            _tx(gas_limit=0)
        assert e.value.field == "gas_limit"

    def test_priority_fee_above_max_fee(self):
        with pytest.raises(InvalidTransaction, match="cannot exceed"):
            _tx(max_priority_fee_per_gas=3, max_fee_per_gas=2)

    def test_zero_chain_id(self):
        with pytest.raises(InvalidTransaction, match="chain_id"):
            _tx(chain_id=0)

    def test_rejects_missing_to(self):
        with pytest.raises(InvalidAddress):
            _tx(to=b"")

    def test_rejects_non_int_fee(self):
        with pytest.raises(InvalidTransaction, match="must be an int"):
            _tx(max_fee_per_gas="2")

    def test_rejects_untyped_authorization(self):
        with pytest.raises(InvalidTransaction, match="AuthorizationTuple"):
            _tx(authorization_list=({"chainId": 1},))

    def test_immutable(self):
        tx = _tx()
        with pytest.raises(AttributeError):
            tx.nonce = 5


class TestFromDict:
    def test_rejects_unknown_field(self, tx_fields, authorization):
        with pytest.raises(InvalidTransaction, match="unknown transaction fields: gas"):
            UnsignedTransaction.from_dict(
                {**tx_fields, "gas": 1, "authorizationList": (authorization,)}
            )

    def test_rejects_missing_field(self, tx_fields, authorization):
        del tx_fields["accessList"]
        with pytest.raises(InvalidTransaction, match="missing transaction fields"):
            UnsignedTransaction.from_dict(
                {**tx_fields, "authorizationList": (authorization,)}
            )

    def test_coerces_hex(self, tx_fields, authorization):
        tx = UnsignedTransaction.from_dict(
            {
                **tx_fields,
                "to": TOKEN,
                "data": "0xabcd",
                "accessList": [{"address": TOKEN, "storageKeys": ["0x" + "01" * 32]}],
                "authorizationList": [authorization],
            }
        )
        assert tx.to == as_address(TOKEN)
        assert tx.data == b"\xab\xcd"
        assert tx.access_list[0].storage_keys == (b"\x01" * 32,)

    def test_as_dict_round_trip(self, tx_fields, authorization):
        tx = UnsignedTransaction.from_dict(
            {**tx_fields, "authorizationList": (authorization,)}
        )
        again = UnsignedTransaction.from_dict(
            {**tx.as_dict(), "authorizationList": tx.authorization_list}
        )
        assert again == tx
