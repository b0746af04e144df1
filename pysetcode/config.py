"""Configuration values.

Nothing is read at import time. ``load_settings`` is the only place that
touches the process environment, and it returns a plain value.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .submitter import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT

SEPOLIA_CHAIN_ID = 11155111
LOCALHOST_CHAIN_ID = 31337

DEFAULT_GAS_LIMIT = 1_000_000


@dataclass(frozen=True)
class NodeSettings:
    """Connection and key settings, usually loaded from a ``.env`` file."""

    rpc_url: str
    chain_id: Optional[int] = None
    authorizer_key: Optional[str] = field(default=None, repr=False)
    sponsor_key: Optional[str] = field(default=None, repr=False)
    delegate_address: Optional[str] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    timeout: float = DEFAULT_TIMEOUT


def load_settings(env_file: Optional[str] = None) -> NodeSettings:
    """
    Read settings from the environment, after loading ``env_file`` if given.

    Recognized variables: RPC_URL, CHAIN_ID, AUTHORIZER_PRIVATE_KEY,
    SPONSOR_PRIVATE_KEY, DELEGATE_ADDRESS, POLL_INTERVAL, RECEIPT_TIMEOUT.

    Raises:
        ValueError: RPC_URL is missing or a numeric variable is malformed
    """
    load_dotenv(env_file if env_file else find_dotenv(usecwd=True))

    rpc_url = os.getenv("RPC_URL")
    if not rpc_url:
        raise ValueError("RPC_URL environment variable not set")

    chain_id = os.getenv("CHAIN_ID")
    return NodeSettings(
        rpc_url=rpc_url,
        chain_id=int(chain_id, 0) if chain_id else None,
        authorizer_key=os.getenv("AUTHORIZER_PRIVATE_KEY") or None,
        sponsor_key=os.getenv("SPONSOR_PRIVATE_KEY") or None,
        delegate_address=os.getenv("DELEGATE_ADDRESS") or None,
        poll_interval=float(os.getenv("POLL_INTERVAL", DEFAULT_POLL_INTERVAL)),
        timeout=float(os.getenv("RECEIPT_TIMEOUT", DEFAULT_TIMEOUT)),
    )
