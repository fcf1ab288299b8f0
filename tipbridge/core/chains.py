"""
Chain registry.

Static table of the chains a tip can be sent from or settled on. Chain ids
follow the aggregator's numbering: EVM chains use their standard integer ids,
non-EVM chains use LI.FI's synthetic ids (e.g. 1151111081099710 for Solana).

Unknown chain ids are a configuration error (``UnknownChainError``), never a
runtime condition the settlement flow recovers from.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Dict, List, Union

from ..services.address import (
    is_valid_bitcoin_address,
    is_valid_evm_address,
    is_valid_solana_address,
    is_valid_sui_address,
)
from .errors import InvalidTipRequest, UnknownChainError


class ChainFamily(str, Enum):
    """Classes of chains sharing one transaction/signing model."""

    EVM = "EVM"
    SOLANA = "Solana"
    BITCOIN = "Bitcoin"
    SUI = "Sui"


EVM_NATIVE_ADDRESS = "0x0000000000000000000000000000000000000000"
BITCOIN_NATIVE_ADDRESS = "bitcoin"
SOLANA_NATIVE_ADDRESS = "11111111111111111111111111111111"
SUI_NATIVE_ADDRESS = "0x2::sui::SUI"

ETHEREUM_CHAIN_ID = 1
OPTIMISM_CHAIN_ID = 10
POLYGON_CHAIN_ID = 137
BASE_CHAIN_ID = 8453
ARBITRUM_CHAIN_ID = 42161
BITCOIN_CHAIN_ID = 20000000000001
SOLANA_CHAIN_ID = 1151111081099710
SUI_CHAIN_ID = 9270000000000000


@dataclass(frozen=True)
class NativeAsset:
    symbol: str
    decimals: int
    address: str
    name: str = ""


@dataclass(frozen=True)
class ChainDescriptor:
    """Immutable description of one supported chain."""

    id: int
    name: str
    family: ChainFamily
    native: NativeAsset
    key: str

    @property
    def is_evm(self) -> bool:
        return self.family == ChainFamily.EVM

    def validate_address(self, address: str) -> bool:
        return _VALIDATORS[self.family](address)

    def to_dict(self) -> Dict[str, Union[str, int]]:
        return {
            "id": self.id,
            "name": self.name,
            "key": self.key,
            "family": self.family.value,
            "native_symbol": self.native.symbol,
            "native_decimals": self.native.decimals,
            "native_address": self.native.address,
        }


_VALIDATORS: Dict[ChainFamily, Callable[[str], bool]] = {
    ChainFamily.EVM: is_valid_evm_address,
    ChainFamily.SOLANA: is_valid_solana_address,
    ChainFamily.BITCOIN: is_valid_bitcoin_address,
    ChainFamily.SUI: is_valid_sui_address,
}


def _evm(chain_id: int, name: str, key: str, symbol: str = "ETH") -> ChainDescriptor:
    return ChainDescriptor(
        id=chain_id,
        name=name,
        family=ChainFamily.EVM,
        native=NativeAsset(symbol=symbol, decimals=18, address=EVM_NATIVE_ADDRESS, name=symbol),
        key=key,
    )


CHAINS: Dict[int, ChainDescriptor] = {
    descriptor.id: descriptor
    for descriptor in (
        _evm(ETHEREUM_CHAIN_ID, "Ethereum", "eth"),
        _evm(OPTIMISM_CHAIN_ID, "Optimism", "opt"),
        _evm(POLYGON_CHAIN_ID, "Polygon", "pol", symbol="POL"),
        _evm(BASE_CHAIN_ID, "Base", "bas"),
        _evm(ARBITRUM_CHAIN_ID, "Arbitrum", "arb"),
        ChainDescriptor(
            id=BITCOIN_CHAIN_ID,
            name="Bitcoin",
            family=ChainFamily.BITCOIN,
            native=NativeAsset(symbol="BTC", decimals=8, address=BITCOIN_NATIVE_ADDRESS, name="Bitcoin"),
            key="btc",
        ),
        ChainDescriptor(
            id=SOLANA_CHAIN_ID,
            name="Solana",
            family=ChainFamily.SOLANA,
            native=NativeAsset(symbol="SOL", decimals=9, address=SOLANA_NATIVE_ADDRESS, name="Solana"),
            key="sol",
        ),
        ChainDescriptor(
            id=SUI_CHAIN_ID,
            name="Sui",
            family=ChainFamily.SUI,
            native=NativeAsset(symbol="SUI", decimals=9, address=SUI_NATIVE_ADDRESS, name="Sui"),
            key="sui",
        ),
    )
}


def describe(chain_id: int) -> ChainDescriptor:
    """Return the descriptor for ``chain_id``.

    Raises:
        UnknownChainError: the id is not part of the registry.
    """
    try:
        return CHAINS[chain_id]
    except KeyError:
        raise UnknownChainError(f"Unknown chain id: {chain_id!r}") from None


def validate_address(chain_id: int, address: str) -> bool:
    return describe(chain_id).validate_address(address)


def family_of(chain_id: int) -> ChainFamily:
    return describe(chain_id).family


def chain_name(chain_id: int) -> str:
    return describe(chain_id).name


def native_asset(chain_id: int) -> NativeAsset:
    return describe(chain_id).native


def is_native_asset(chain_id: int, asset_address: str) -> bool:
    native = describe(chain_id).native.address
    if describe(chain_id).is_evm:
        return asset_address.lower() == native.lower()
    return asset_address == native


def chains_by_family(family: ChainFamily) -> List[ChainDescriptor]:
    return [descriptor for descriptor in CHAINS.values() if descriptor.family == family]


def parse_amount(amount: str) -> Decimal:
    """Parse a human-unit decimal string; must be finite and > 0."""

    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidTipRequest(f"Invalid amount: {amount!r}") from None
    if not value.is_finite() or value <= 0:
        raise InvalidTipRequest(f"Amount must be greater than zero: {amount!r}")
    return value


def to_smallest_units(amount: Union[str, Decimal], decimals: int) -> int:
    """Convert a human-unit amount to integer base units, exactly.

    ``"1"`` BTC (8 decimals) -> 100000000; ``"0.1"`` with 18 decimals ->
    100000000000000000. Amounts with more precision than the asset supports
    are rejected rather than truncated.
    """
    value = amount if isinstance(amount, Decimal) else parse_amount(amount)
    try:
        scaled = value.scaleb(decimals)
        exact = scaled == scaled.to_integral_value()
    except ArithmeticError:
        raise InvalidTipRequest(f"Amount out of range: {value}") from None
    if not exact:
        raise InvalidTipRequest(
            f"Amount {value} has more than {decimals} decimal places"
        )
    units = int(scaled)
    if units <= 0:
        raise InvalidTipRequest(f"Amount must be greater than zero: {value}")
    return units


def from_smallest_units(units: int, decimals: int) -> Decimal:
    return Decimal(units).scaleb(-decimals)


__all__ = [
    "ChainFamily",
    "NativeAsset",
    "ChainDescriptor",
    "CHAINS",
    "EVM_NATIVE_ADDRESS",
    "BITCOIN_NATIVE_ADDRESS",
    "SOLANA_NATIVE_ADDRESS",
    "SUI_NATIVE_ADDRESS",
    "ETHEREUM_CHAIN_ID",
    "OPTIMISM_CHAIN_ID",
    "POLYGON_CHAIN_ID",
    "BASE_CHAIN_ID",
    "ARBITRUM_CHAIN_ID",
    "BITCOIN_CHAIN_ID",
    "SOLANA_CHAIN_ID",
    "SUI_CHAIN_ID",
    "describe",
    "validate_address",
    "family_of",
    "chain_name",
    "native_asset",
    "is_native_asset",
    "chains_by_family",
    "parse_amount",
    "to_smallest_units",
    "from_smallest_units",
]
