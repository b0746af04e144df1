"""Builder pattern for constructing set-code transactions."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from .errors import InvalidTransaction
from .models import AccessListItem, AuthorizationTuple, UnsignedTransaction
from .types import Address, BytesLike, as_address, as_bytes


def build_transaction(
    tx_fields: Mapping[str, Any],
    authorization_list: Sequence[AuthorizationTuple],
    *,
    require_authorization: bool = True,
) -> UnsignedTransaction:
    """
    Merge transaction fields with an authorization list.

    Args:
        tx_fields: camelCase mapping of every field except ``authorizationList``
        authorization_list: Signed tuples, kept in the given order
        require_authorization: Reject an empty list (delegation transactions)

    Returns:
        A validated, immutable UnsignedTransaction

    Raises:
        InvalidTransaction: If a field is unknown, missing, or invalid
    """
    if "authorizationList" in tx_fields:
        raise InvalidTransaction(
            "pass the authorization list separately", field="authorizationList"
        )
    if require_authorization and not authorization_list:
        raise InvalidTransaction(
            "at least one authorization is required", field="authorizationList"
        )
    return UnsignedTransaction.from_dict(
        {**tx_fields, "authorizationList": tuple(authorization_list)}
    )


@dataclass
class SetCodeTransactionBuilder:
    """
    Fluent builder for constructing set-code transactions.

    Example:
        tx = (SetCodeTransactionBuilder(chain_id=11155111)
            .set_to(authorizer_address)
            .set_gas(1_000_000)
            .set_max_fee_per_gas(20_000_000_000)
            .set_max_priority_fee_per_gas(2_000_000_000)
            .set_data(encode_execute(call))
            .add_authorization(auth)
            .build())
    """

    chain_id: int = 1
    nonce: int = 0
    max_priority_fee_per_gas: int = 0
    max_fee_per_gas: int = 0
    gas_limit: int = 1_000_000
    to: Optional[Address] = None
    value: int = 0
    data: bytes = b""
    require_authorization: bool = True
    access_list: list[AccessListItem] = field(default_factory=list)
    authorization_list: list[AuthorizationTuple] = field(default_factory=list)

    def set_gas(self, gas_limit: int) -> "SetCodeTransactionBuilder":
        """Set the gas limit."""
        self.gas_limit = gas_limit
        return self

    def set_max_fee_per_gas(self, max_fee: int) -> "SetCodeTransactionBuilder":
        """Set the maximum fee per gas."""
        self.max_fee_per_gas = max_fee
        return self

    def set_max_priority_fee_per_gas(
        self, priority_fee: int
    ) -> "SetCodeTransactionBuilder":
        """Set the maximum priority fee per gas."""
        self.max_priority_fee_per_gas = priority_fee
        return self

    def set_nonce(self, nonce: int) -> "SetCodeTransactionBuilder":
        """Set the sender (payer) nonce."""
        self.nonce = nonce
        return self

    def set_to(self, to: BytesLike) -> "SetCodeTransactionBuilder":
        self.to = as_address(to)
        return self

    def set_value(self, value: int) -> "SetCodeTransactionBuilder":
        self.value = value
        return self

    def set_data(self, data: BytesLike) -> "SetCodeTransactionBuilder":
        self.data = as_bytes(data)
        return self

    def allow_empty_authorization_list(self) -> "SetCodeTransactionBuilder":
        """Permit a plain type-4 transaction without delegation."""
        self.require_authorization = False
        return self

    def add_access_list_item(
        self,
        address: BytesLike,
        storage_keys: tuple[BytesLike, ...] = (),
    ) -> "SetCodeTransactionBuilder":
        """Add an access list entry."""
        self.access_list.append(
            AccessListItem.create(address=address, storage_keys=storage_keys)
        )
        return self

    def add_authorization(
        self, authorization: AuthorizationTuple
    ) -> "SetCodeTransactionBuilder":
        """Append a signed authorization tuple."""
        self.authorization_list.append(authorization)
        return self

    def build(self) -> UnsignedTransaction:
        """
        Build and validate the transaction.

        Returns:
            A validated, immutable UnsignedTransaction

        Raises:
            InvalidTransaction: If validation fails
        """
        if self.to is None:
            raise InvalidTransaction("to is required", field="to")
        return build_transaction(
            {
                "chainId": self.chain_id,
                "nonce": self.nonce,
                "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
                "maxFeePerGas": self.max_fee_per_gas,
                "gasLimit": self.gas_limit,
                "to": self.to,
                "value": self.value,
                "data": self.data,
                "accessList": tuple(self.access_list),
            },
            self.authorization_list,
            require_authorization=self.require_authorization,
        )
