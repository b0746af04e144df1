"""
Example: Batch Calls Through a Delegated Account

Builds the transaction step by step instead of using DelegatedCallFlow:
sign the authorization, encode executeBatch(), build, sign and submit.
Both transfers succeed or neither does.

Usage:
    RPC_URL=... AUTHORIZER_PRIVATE_KEY=0x... DELEGATE_ADDRESS=0x... \
    python examples/batch_calls.py
"""

from eth_account import Account

from pysetcode import (
    Call,
    SetCodeTransactionBuilder,
    Submitter,
    assemble_and_sign,
    encode_calls,
    load_settings,
    sign_authorization,
)

settings = load_settings()
submitter = Submitter.from_rpc_url(settings.rpc_url)
chain_id = settings.chain_id or submitter.get_chain_id()

authorizer = Account.from_key(settings.authorizer_key)
nonce = submitter.get_nonce(authorizer.address)
fees = submitter.get_fee_estimate()

# Self-sponsored: the sender's nonce is bumped before the authorization applies
auth = sign_authorization(
    settings.authorizer_key, chain_id, settings.delegate_address, nonce + 1
)

calls = [
    Call.create(target="0x" + "bb" * 20, value=1),
    Call.create(target="0x" + "cc" * 20, value=2),
]

tx = (
    SetCodeTransactionBuilder(chain_id=chain_id)
    .set_nonce(nonce)
    .set_gas(1_000_000)
    .set_max_fee_per_gas(fees.max_fee_per_gas)
    .set_max_priority_fee_per_gas(fees.max_priority_fee_per_gas)
    .set_to(authorizer.address)
    .set_data(encode_calls(calls))
    .add_authorization(auth)
    .build()
)

raw = assemble_and_sign(tx, settings.authorizer_key)
tx_hash = submitter.submit(raw)
print(f"Transaction hash: {tx_hash.to_0x_hex()}")

print("Waiting for confirmation...")
receipt = submitter.await_receipt(tx_hash)
print(f"Confirmed in block {receipt['blockNumber']} (gas used: {receipt['gasUsed']})")
