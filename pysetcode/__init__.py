"""
PySetCode - EIP-7702 set-code transactions for web3.py

Signs authorization tuples, assembles type 0x04 transactions for
self-sponsored or sponsored delegation, and submits them through web3.py.
"""

from .assembler import (
    RawTransactionAssembler,
    assemble_and_sign,
    decode_raw_transaction,
)
from .authorization import (
    AuthorizationSigner,
    authorization_digest,
    recover_authority,
    sign_authorization,
)
from .builder import SetCodeTransactionBuilder, build_transaction
from .calls import encode_calls, encode_execute, encode_execute_batch
from .codec import decode_list, decode_uint, encode_list, encode_uint
from .config import NodeSettings, load_settings
from .delegation import DelegationInfo, get_delegation, parse_delegation_code
from .errors import (
    EncodingError,
    ExecutionReverted,
    InvalidAddress,
    InvalidTransaction,
    NodeRejection,
    ReceiptTimeout,
    SetCodeError,
    SigningError,
    Stage,
)
from .flow import (
    DelegatedCallFlow,
    DelegationConfig,
    FlowResult,
    KeyLocks,
    SponsorMode,
    TransactionState,
)
from .models import (
    AccessListItem,
    AuthorizationTuple,
    Call,
    RawTransaction,
    Signature,
    SignedTransaction,
    UnsignedTransaction,
)
from .submitter import FeeEstimate, Submitter
from .types import Address, Hash32, as_address, as_bytes, as_hash32

__version__ = "0.1.0"

__all__ = [
    # Types
    "Address",
    "Hash32",
    "as_address",
    "as_bytes",
    "as_hash32",
    # Codec
    "decode_list",
    "decode_uint",
    "encode_list",
    "encode_uint",
    # Models
    "AccessListItem",
    "AuthorizationTuple",
    "Call",
    "RawTransaction",
    "Signature",
    "SignedTransaction",
    "UnsignedTransaction",
    # Signing and assembly
    "AuthorizationSigner",
    "RawTransactionAssembler",
    "SetCodeTransactionBuilder",
    "assemble_and_sign",
    "authorization_digest",
    "build_transaction",
    "decode_raw_transaction",
    "recover_authority",
    "sign_authorization",
    # Delegate calls
    "encode_calls",
    "encode_execute",
    "encode_execute_batch",
    # Network
    "DelegationInfo",
    "FeeEstimate",
    "Submitter",
    "get_delegation",
    "parse_delegation_code",
    # Flow and config
    "DelegatedCallFlow",
    "DelegationConfig",
    "FlowResult",
    "KeyLocks",
    "NodeSettings",
    "SponsorMode",
    "TransactionState",
    "load_settings",
    # Errors
    "EncodingError",
    "ExecutionReverted",
    "InvalidAddress",
    "InvalidTransaction",
    "NodeRejection",
    "ReceiptTimeout",
    "SetCodeError",
    "SigningError",
    "Stage",
]
