"""
Example: Sponsored Delegated Call

The authorizer only signs the authorization; a separate sponsor signs
and pays for the outer transaction.

Usage:
    RPC_URL=... AUTHORIZER_PRIVATE_KEY=0x... SPONSOR_PRIVATE_KEY=0x... \
    DELEGATE_ADDRESS=0x... python examples/sponsored.py
"""

import logging

from pysetcode import (
    Call,
    DelegatedCallFlow,
    DelegationConfig,
    SponsorMode,
    Submitter,
    load_settings,
)

logging.basicConfig(level=logging.INFO)

settings = load_settings()
if not settings.sponsor_key:
    raise ValueError("SPONSOR_PRIVATE_KEY environment variable not set")

submitter = Submitter.from_rpc_url(settings.rpc_url)
config = DelegationConfig.from_settings(
    settings,
    calls=[Call.create(target="0x" + "bb" * 20, value=1)],
    chain_id=settings.chain_id or submitter.get_chain_id(),
)
assert config.mode is SponsorMode.SPONSORED

result = DelegatedCallFlow(config, submitter).run()

print(f"Transaction hash: {result.tx_hash.to_0x_hex()}")
print(f"Paid by: {result.receipt['from']}")
