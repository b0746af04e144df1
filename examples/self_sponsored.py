"""
Example: Self-Sponsored Delegated Call

The authorizer signs an authorization delegating its EOA to a contract,
then pays for a type 0x04 transaction that calls the contract's
execute() on its own address.

Usage:
    RPC_URL=http://localhost:8545 AUTHORIZER_PRIVATE_KEY=0x... \
    DELEGATE_ADDRESS=0x... python examples/self_sponsored.py
"""

import logging

from pysetcode import (
    Call,
    DelegatedCallFlow,
    DelegationConfig,
    Submitter,
    load_settings,
)

logging.basicConfig(level=logging.INFO)

settings = load_settings()
submitter = Submitter.from_rpc_url(settings.rpc_url)

# Send 1 wei to a receiver from the authorizer's delegated account
config = DelegationConfig.from_settings(
    settings,
    calls=[Call.create(target="0x" + "bb" * 20, value=1)],
    chain_id=settings.chain_id or submitter.get_chain_id(),
    sponsor_key=None,
)

flow = DelegatedCallFlow(config, submitter)
result = flow.run()

print(f"Transaction hash: {result.tx_hash.to_0x_hex()}")
print(f"Authorization nonce: {result.authorization.nonce}")
print(f"Confirmed in block {result.receipt['blockNumber']}")
