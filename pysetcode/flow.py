"""Parameterized delegated-call flow.

One configuration drives both submission variants:

- ``SponsorMode.SELF``: the authorizer signs the authorization and pays for
  the outer transaction. The outer transaction uses the authorizer's
  current nonce and the authorization uses ``current + 1``, because the
  sender's nonce is incremented before the authorization list is applied.
- ``SponsorMode.SPONSORED``: the authorizer signs only the authorization
  (at its current nonce); the sponsor signs and pays for the outer
  transaction at the sponsor's own nonce.

In both modes the outer transaction targets the authorizer's address, so
the calls execute under the delegate contract's code.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Sequence

from hexbytes import HexBytes

from .assembler import assemble_and_sign
from .authorization import load_account, sign_authorization
from .builder import SetCodeTransactionBuilder
from .calls import encode_calls
from .config import DEFAULT_GAS_LIMIT, NodeSettings
from .errors import (
    ExecutionReverted,
    InvalidAddress,
    InvalidTransaction,
    NodeRejection,
    ReceiptTimeout,
    Stage,
)
from .models import AuthorizationTuple, Call, RawTransaction
from .submitter import Submitter
from .types import Address, BytesLike, as_address, is_zero_address

logger = logging.getLogger(__name__)


class SponsorMode(str, Enum):
    SELF = "self"
    SPONSORED = "sponsored"


class TransactionState(str, Enum):
    BUILT = "built"
    AUTHORIZATION_SIGNED = "authorization_signed"
    ASSEMBLED = "assembled"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"
    REJECTED_BY_NODE = "rejected_by_node"
    TIMED_OUT = "timed_out"


TERMINAL_STATES = frozenset(
    {
        TransactionState.CONFIRMED,
        TransactionState.REVERTED,
        TransactionState.REJECTED_BY_NODE,
        TransactionState.TIMED_OUT,
    }
)


class KeyLocks:
    """
    Per-address locks serializing "fetch nonce -> sign -> submit".

    Two flows using the same authorizer or sponsor key must not interleave
    their nonce reads and broadcasts.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[bytes, threading.Lock] = {}

    def lock_for(self, address: BytesLike) -> threading.Lock:
        key = bytes(as_address(address))
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *addresses: BytesLike) -> Iterator[None]:
        """Acquire the locks for all ``addresses`` in a fixed order."""
        unique = sorted({bytes(as_address(a)) for a in addresses})
        locks = [self.lock_for(a) for a in unique]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()


DEFAULT_KEY_LOCKS = KeyLocks()


@dataclass(frozen=True)
class DelegationConfig:
    """Everything one delegated call needs; keys are excluded from repr."""

    chain_id: int
    authorizer_key: str = field(repr=False)
    delegate: Address
    calls: tuple[Call, ...]
    mode: SponsorMode = SponsorMode.SELF
    sponsor_key: Optional[str] = field(default=None, repr=False)
    gas_limit: int = DEFAULT_GAS_LIMIT
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    poll_interval: Optional[float] = None
    timeout: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "mode", SponsorMode(self.mode))
        object.__setattr__(self, "sponsor_key", self.sponsor_key or None)
        # Fail on malformed keys before any network access.
        load_account(
            self.authorizer_key, stage=Stage.AUTHORIZATION, role="authorizer"
        )
        if self.chain_id <= 0:
            raise InvalidTransaction("chain_id must be > 0", field="chain_id")
        try:
            delegate = as_address(self.delegate)
        except (TypeError, ValueError) as e:
            raise InvalidAddress(
                str(e), stage=Stage.AUTHORIZATION, field="address"
            ) from None
        if is_zero_address(delegate):
            raise InvalidAddress(
                "delegate must be a non-zero 20-byte address",
                stage=Stage.AUTHORIZATION,
                field="address",
            )
        object.__setattr__(self, "delegate", delegate)
        object.__setattr__(self, "calls", tuple(self.calls))
        if not self.calls:
            raise InvalidTransaction("at least one call is required", field="data")
        if self.mode is SponsorMode.SELF and self.sponsor_key is not None:
            raise InvalidTransaction(
                "sponsor_key given for a self-sponsored flow", field="sponsor_key"
            )
        if self.mode is SponsorMode.SPONSORED:
            if self.sponsor_key is None:
                raise InvalidTransaction(
                    "sponsored flow requires sponsor_key", field="sponsor_key"
                )
            if self.sponsor_address == self.authorizer_address:
                raise InvalidTransaction(
                    "sponsor must differ from the authorizer; use SponsorMode.SELF",
                    field="sponsor_key",
                )

    @property
    def authorizer_address(self) -> Address:
        account = load_account(
            self.authorizer_key, stage=Stage.AUTHORIZATION, role="authorizer"
        )
        return as_address(account.address)

    @property
    def sponsor_address(self) -> Optional[Address]:
        if self.sponsor_key is None:
            return None
        account = load_account(self.sponsor_key, stage=Stage.ASSEMBLY, role="sponsor")
        return as_address(account.address)

    @property
    def payer_key(self) -> str:
        if self.mode is SponsorMode.SPONSORED:
            return self.sponsor_key
        return self.authorizer_key

    @property
    def payer_address(self) -> Address:
        if self.mode is SponsorMode.SPONSORED:
            return self.sponsor_address
        return self.authorizer_address

    @classmethod
    def create(
        cls,
        chain_id: int,
        authorizer_key: str,
        delegate: BytesLike,
        calls: Sequence[Call],
        sponsor_key: Optional[str] = None,
        **kwargs,
    ) -> "DelegationConfig":
        """Create a config, picking the mode from ``sponsor_key``."""
        sponsor_key = sponsor_key or None
        mode = SponsorMode.SPONSORED if sponsor_key is not None else SponsorMode.SELF
        return cls(
            chain_id=chain_id,
            authorizer_key=authorizer_key,
            delegate=delegate,
            calls=tuple(calls),
            mode=kwargs.pop("mode", mode),
            sponsor_key=sponsor_key,
            **kwargs,
        )

    @classmethod
    def from_settings(
        cls,
        settings: NodeSettings,
        calls: Sequence[Call],
        *,
        chain_id: Optional[int] = None,
        **kwargs,
    ) -> "DelegationConfig":
        chain_id = chain_id if chain_id is not None else settings.chain_id
        if chain_id is None:
            raise InvalidTransaction("chain_id is not configured", field="chain_id")
        if not settings.authorizer_key:
            raise InvalidTransaction(
                "authorizer key is not configured", field="authorizer_key"
            )
        if not settings.delegate_address:
            raise InvalidAddress("delegate address is not configured", field="address")
        kwargs.setdefault("poll_interval", settings.poll_interval)
        kwargs.setdefault("timeout", settings.timeout)
        kwargs.setdefault("sponsor_key", settings.sponsor_key)
        return cls.create(
            chain_id=chain_id,
            authorizer_key=settings.authorizer_key,
            delegate=settings.delegate_address,
            calls=calls,
            **kwargs,
        )


@dataclass(frozen=True)
class FlowResult:
    state: TransactionState
    raw: RawTransaction
    authorization: AuthorizationTuple
    tx_hash: Optional[HexBytes] = None
    receipt: Optional[dict] = None


class DelegatedCallFlow:
    """Build, sign, submit and confirm one delegated call."""

    def __init__(
        self,
        config: DelegationConfig,
        submitter: Submitter,
        locks: Optional[KeyLocks] = None,
    ):
        self.config = config
        self.submitter = submitter
        self.locks = locks if locks is not None else DEFAULT_KEY_LOCKS
        self.history: list[TransactionState] = []

    @property
    def state(self) -> Optional[TransactionState]:
        return self.history[-1] if self.history else None

    def _transition(self, state: TransactionState) -> None:
        previous = self.state.value if self.state else "-"
        logger.debug("flow %s -> %s", previous, state.value)
        self.history.append(state)

    def _nonces(self) -> tuple[int, int]:
        """(authorization nonce, outer transaction nonce)"""
        authorizer_nonce = self.submitter.get_nonce(self.config.authorizer_address)
        if self.config.mode is SponsorMode.SELF:
            return authorizer_nonce + 1, authorizer_nonce
        return authorizer_nonce, self.submitter.get_nonce(self.config.sponsor_address)

    def _fees(self) -> tuple[int, int]:
        """(max_fee_per_gas, max_priority_fee_per_gas)"""
        max_fee = self.config.max_fee_per_gas
        priority = self.config.max_priority_fee_per_gas
        if max_fee is None or priority is None:
            estimate = self.submitter.get_fee_estimate()
            if max_fee is None:
                max_fee = estimate.max_fee_per_gas
            if priority is None:
                priority = estimate.max_priority_fee_per_gas
        return max_fee, priority

    def _prepare(self) -> tuple[RawTransaction, AuthorizationTuple]:
        config = self.config
        self.history = []
        auth_nonce, tx_nonce = self._nonces()
        max_fee, priority = self._fees()
        self._transition(TransactionState.BUILT)

        authorization = sign_authorization(
            config.authorizer_key, config.chain_id, config.delegate, auth_nonce
        )
        self._transition(TransactionState.AUTHORIZATION_SIGNED)

        unsigned = (
            SetCodeTransactionBuilder(chain_id=config.chain_id)
            .set_nonce(tx_nonce)
            .set_gas(config.gas_limit)
            .set_max_fee_per_gas(max_fee)
            .set_max_priority_fee_per_gas(priority)
            .set_to(config.authorizer_address)
            .set_data(encode_calls(config.calls))
            .add_authorization(authorization)
            .build()
        )
        self._transition(TransactionState.ASSEMBLED)

        raw = assemble_and_sign(unsigned, config.payer_key)
        self._transition(TransactionState.SIGNED)

        logger.info(
            "prepared %s set-code transaction: authorization nonce %d, "
            "transaction nonce %d, %d call(s)",
            config.mode.value,
            auth_nonce,
            tx_nonce,
            len(config.calls),
        )
        return raw, authorization

    def prepare(self) -> RawTransaction:
        """Fetch nonces and fees, sign the authorization, build and sign."""
        with self.locks.hold(self.config.authorizer_address, self.config.payer_address):
            raw, _ = self._prepare()
        return raw

    def run(self) -> FlowResult:
        """
        Prepare, submit and wait for the receipt.

        Raises:
            NodeRejection: broadcast refused (state REJECTED_BY_NODE)
            ExecutionReverted: included but reverted (state REVERTED)
            ReceiptTimeout: no receipt in time (state TIMED_OUT)
        """
        config = self.config
        with self.locks.hold(config.authorizer_address, config.payer_address):
            raw, authorization = self._prepare()
            try:
                tx_hash = self.submitter.submit(raw)
            except NodeRejection:
                self._transition(TransactionState.REJECTED_BY_NODE)
                raise
            self._transition(TransactionState.SUBMITTED)

        self._transition(TransactionState.PENDING)
        try:
            receipt = self.submitter.await_receipt(
                tx_hash, poll_interval=config.poll_interval, timeout=config.timeout
            )
        except ExecutionReverted:
            self._transition(TransactionState.REVERTED)
            raise
        except ReceiptTimeout:
            self._transition(TransactionState.TIMED_OUT)
            raise
        self._transition(TransactionState.CONFIRMED)

        return FlowResult(
            state=TransactionState.CONFIRMED,
            raw=raw,
            authorization=authorization,
            tx_hash=tx_hash,
            receipt=receipt,
        )
