"""
Example: Inspect an Account's Delegation

Usage:
    RPC_URL=... python examples/check_delegation.py 0xADDRESS
"""

import sys

from pysetcode import Submitter, get_delegation, load_settings

settings = load_settings()
submitter = Submitter.from_rpc_url(settings.rpc_url)

info = get_delegation(submitter, sys.argv[1])
if info.is_delegated:
    print(f"Delegated to {info.delegated_address}")
elif info.is_plain_eoa:
    print("Plain EOA, no delegation")
else:
    print(f"Contract account ({len(info.raw_code)} bytes of code)")
