"""
Settlement models and types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .chains import (
    ChainDescriptor,
    ChainFamily,
    describe,
    is_native_asset,
    to_smallest_units,
)
from .errors import InvalidTipRequest, UnknownChainError


class GasTier(str, Enum):
    """User-selected EVM gas price tier."""
    AUTO = "auto"
    FAST = "fast"
    INSTANT = "instant"


@dataclass(frozen=True)
class Asset:
    """An asset on a specific chain (native sentinel or token address)."""
    symbol: str
    address: str
    decimals: int

    @classmethod
    def native(cls, chain_id: int) -> "Asset":
        native = describe(chain_id).native
        return cls(symbol=native.symbol, address=native.address, decimals=native.decimals)


@dataclass(frozen=True)
class TipRequest:
    """One viewer submission. Discarded after a single settlement attempt."""
    sender_chain_id: int
    sender_address: str
    asset: Asset
    amount: str                                 # Human units, e.g. "0.01"
    recipient_address: str
    recipient_chain_id: int                     # Settlement chain, fixed per deployment
    message: str = ""
    display_name: Optional[str] = None
    gas_tier: GasTier = GasTier.AUTO
    slippage: Optional[Decimal] = None

    def __post_init__(self) -> None:
        try:
            settlement_chain = describe(self.recipient_chain_id)
            describe(self.sender_chain_id)
        except UnknownChainError as exc:
            raise InvalidTipRequest(str(exc)) from exc
        to_smallest_units(self.amount, self.asset.decimals)
        if not self.recipient_address:
            raise InvalidTipRequest("Recipient address is required")
        if not settlement_chain.validate_address(self.recipient_address):
            raise InvalidTipRequest(
                f"Recipient address {self.recipient_address!r} is not a valid {settlement_chain.name} address"
            )
        if self.slippage is not None and not (Decimal("0") <= self.slippage < Decimal("1")):
            raise InvalidTipRequest(f"Slippage must be a fraction in [0, 1): {self.slippage}")

    @property
    def source_chain(self) -> ChainDescriptor:
        return describe(self.sender_chain_id)

    @property
    def family(self) -> ChainFamily:
        return self.source_chain.family

    @property
    def amount_in_smallest_units(self) -> int:
        return to_smallest_units(self.amount, self.asset.decimals)

    @property
    def is_native_asset(self) -> bool:
        return is_native_asset(self.sender_chain_id, self.asset.address)


@dataclass(frozen=True)
class TransactionPayload:
    """Opaque executable payload returned by the aggregator.

    For EVM sources ``data`` is calldata; for Solana a base64 versioned
    transaction; for Bitcoin a PSBT in hex.
    """
    data: str
    to: Optional[str] = None
    value: int = 0
    gas_price: Optional[int] = None
    chain_id: Optional[int] = None

    def to_evm_transaction(self, from_address: str) -> Dict[str, Any]:
        tx: Dict[str, Any] = {
            "from": from_address,
            "to": self.to,
            "data": self.data,
            "value": hex(self.value),
        }
        if self.gas_price is not None:
            tx["gasPrice"] = hex(self.gas_price)
        return tx


@dataclass(frozen=True)
class Quote:
    """Parsed aggregator route. Fetched once per attempt, never reused."""
    from_chain_id: int
    to_chain_id: int
    from_token: str
    to_token: str
    from_address: str
    destination_address: str
    from_amount: int                            # In smallest units
    payload: TransactionPayload
    approval_address: Optional[str] = None      # EVM spender
    to_amount_estimate: Optional[int] = None
    tool: Optional[str] = None
    quote_id: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ApprovalState:
    """ERC20 allowance snapshot for one (token, owner, spender)."""
    token_address: str
    owner: str
    spender: str
    allowance: int
    required: int

    @property
    def is_sufficient(self) -> bool:
        return self.allowance >= self.required


@dataclass(frozen=True)
class ExecutionResult:
    """Settled tip, ready for the ledger and overlay collaborators."""
    tx_id: str
    source_chain_id: int
    destination_chain_id: int
    source_address: str
    destination_address: str
    asset_symbol: str
    amount: str
    message: str = ""
    display_name: Optional[str] = None

    def to_ledger_payload(self, streamer_id: str) -> Dict[str, Any]:
        return {
            "streamerId": streamer_id,
            "sender": self.display_name or "Anonymous",
            "message": self.message,
            "amount": self.amount,
            "txHash": self.tx_id,
            "asset": self.asset_symbol,
            # Source chain is the main chain id of the record
            "chainId": str(self.source_chain_id),
            "sourceChain": str(self.source_chain_id),
            "destChain": str(self.destination_chain_id),
            "sourceAddress": self.source_address,
            "destAddress": self.destination_address,
        }


@dataclass(frozen=True)
class SuiTransactionBlock:
    """Programmable transaction block: split ``amount`` off the gas coin and
    transfer it to ``recipient``."""
    sender: str
    recipient: str
    amount: int                                 # MIST
    network: str

    def commands(self) -> List[Dict[str, Any]]:
        return [
            {
                "SplitCoins": {
                    "coin": {"GasCoin": True},
                    "amounts": [{"Input": 0}],
                }
            },
            {
                "TransferObjects": {
                    "objects": [{"NestedResult": [0, 0]}],
                    "address": {"Input": 1},
                }
            },
        ]

    def to_json(self) -> Dict[str, Any]:
        return {
            "version": 2,
            "sender": self.sender,
            "inputs": [
                {"Pure": {"type": "u64", "value": str(self.amount)}},
                {"Pure": {"type": "address", "value": self.recipient}},
            ],
            "commands": self.commands(),
        }
