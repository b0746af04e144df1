"""Calldata for the delegate contract's execute entry points.

From this package's perspective the payloads are opaque: they become the
``data`` field of the outer transaction, which targets the authorizer's
own (delegated) address.
"""

from typing import Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from .models import Call

EXECUTE_SIGNATURE = "execute(address,uint256,bytes)"
EXECUTE_BATCH_SIGNATURE = "executeBatch((address,uint256,bytes)[])"

EXECUTE_SELECTOR = function_signature_to_4byte_selector(EXECUTE_SIGNATURE)
EXECUTE_BATCH_SELECTOR = function_signature_to_4byte_selector(EXECUTE_BATCH_SIGNATURE)


def encode_execute(call: Call) -> bytes:
    """Encode ``execute(target, value, data)`` for a single call."""
    return EXECUTE_SELECTOR + encode(
        ["address", "uint256", "bytes"], list(call.as_abi_tuple())
    )


def encode_execute_batch(calls: Sequence[Call]) -> bytes:
    """Encode ``executeBatch(calls)``; the delegate runs them in order, atomically."""
    if not calls:
        raise ValueError("executeBatch requires at least one call")
    return EXECUTE_BATCH_SELECTOR + encode(
        ["(address,uint256,bytes)[]"], [[c.as_abi_tuple() for c in calls]]
    )


def encode_calls(calls: Sequence[Call]) -> bytes:
    """``execute`` for one call, ``executeBatch`` for several."""
    if len(calls) == 1:
        return encode_execute(calls[0])
    return encode_execute_batch(calls)
