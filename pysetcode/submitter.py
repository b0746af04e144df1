"""Broadcast and confirmation of raw set-code transactions through web3.py."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from eth_utils import to_checksum_address
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TimeExhausted, TransactionNotFound, Web3RPCError

from .errors import ExecutionReverted, NodeRejection, ReceiptTimeout, Stage
from .models import RawTransaction
from .types import BytesLike

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_TIMEOUT = 120.0


@dataclass(frozen=True)
class FeeEstimate:
    """EIP-1559 fee pair suggested by the node."""

    max_fee_per_gas: int
    max_priority_fee_per_gas: int


class Submitter:
    """
    Thin wrapper over a web3 connection.

    Broadcast is a single best-effort call: no resubmission, no fee bumping.
    Receipt polling blocks until inclusion or timeout and cannot tell a
    dropped transaction from a pending one.
    """

    def __init__(
        self,
        w3: Web3,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.w3 = w3
        self.poll_interval = poll_interval
        self.timeout = timeout

    @classmethod
    def from_rpc_url(cls, rpc_url: str, **kwargs) -> "Submitter":
        return cls(Web3(Web3.HTTPProvider(rpc_url)), **kwargs)

    def get_chain_id(self) -> int:
        return self.w3.eth.chain_id

    def get_nonce(self, address: Union[str, bytes]) -> int:
        """Account nonce including transactions already in the node's pool."""
        return self.w3.eth.get_transaction_count(
            to_checksum_address(address), "pending"
        )

    def get_fee_estimate(self) -> FeeEstimate:
        """Priority fee from the node, max fee as twice the base fee plus tip."""
        priority = self.w3.eth.max_priority_fee
        base_fee = self.w3.eth.get_block("latest").get("baseFeePerGas", 0)
        return FeeEstimate(
            max_fee_per_gas=2 * base_fee + priority,
            max_priority_fee_per_gas=priority,
        )

    def get_code(self, address: Union[str, bytes]) -> bytes:
        return bytes(self.w3.eth.get_code(to_checksum_address(address)))

    def submit(self, raw: RawTransaction) -> HexBytes:
        """
        Broadcast a raw transaction.

        Returns:
            Transaction hash reported by the node

        Raises:
            NodeRejection: the node refused the transaction
        """
        try:
            tx_hash = self.w3.eth.send_raw_transaction(raw.raw)
        except Web3RPCError as e:
            nonce = raw.signed.transaction.nonce if raw.signed else None
            logger.warning("node rejected transaction 0x%s: %s", raw.hash.hex(), e)
            raise NodeRejection(
                str(e),
                field="rawTransaction",
                nonce=nonce,
                digest=raw.signing_hash,
                tx_hash=raw.hash,
            ) from e
        logger.info("submitted transaction %s", HexBytes(tx_hash).to_0x_hex())
        return HexBytes(tx_hash)

    def get_transaction_receipt(self, tx_hash: BytesLike):
        """Receipt if the transaction is included, else None."""
        try:
            return self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

    def await_receipt(
        self,
        tx_hash: BytesLike,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        """
        Block until ``tx_hash`` is included.

        Raises:
            ReceiptTimeout: no receipt within ``timeout`` seconds
            ExecutionReverted: included with status 0
        """
        poll_interval = self.poll_interval if poll_interval is None else poll_interval
        timeout = self.timeout if timeout is None else timeout
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout, poll_latency=poll_interval
            )
        except TimeExhausted as e:
            logger.warning(
                "no receipt for %s after %.1fs", HexBytes(tx_hash).to_0x_hex(), timeout
            )
            raise ReceiptTimeout(
                f"no receipt after {timeout}s",
                field="receipt",
                tx_hash=bytes(HexBytes(tx_hash)),
            ) from e

        if receipt["status"] == 0:
            logger.warning(
                "transaction %s reverted in block %s",
                HexBytes(tx_hash).to_0x_hex(),
                receipt["blockNumber"],
            )
            raise ExecutionReverted(
                f"reverted in block {receipt['blockNumber']}",
                field="status",
                tx_hash=bytes(HexBytes(tx_hash)),
                receipt=receipt,
            )

        logger.info(
            "transaction %s confirmed in block %s (gas used: %s)",
            HexBytes(tx_hash).to_0x_hex(),
            receipt["blockNumber"],
            receipt["gasUsed"],
        )
        return receipt
