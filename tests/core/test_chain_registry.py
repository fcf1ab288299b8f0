from decimal import Decimal

import pytest

from tipbridge.core.chains import (
    BASE_CHAIN_ID,
    BITCOIN_CHAIN_ID,
    CHAINS,
    EVM_NATIVE_ADDRESS,
    SOLANA_CHAIN_ID,
    SUI_CHAIN_ID,
    ChainFamily,
    chains_by_family,
    describe,
    family_of,
    from_smallest_units,
    is_native_asset,
    native_asset,
    to_smallest_units,
    validate_address,
)
from tipbridge.core.errors import InvalidTipRequest, UnknownChainError


def test_registry_covers_every_family():
    families = {descriptor.family for descriptor in CHAINS.values()}
    assert families == set(ChainFamily)
    assert [c.id for c in chains_by_family(ChainFamily.EVM)] == [1, 10, 137, 8453, 42161]


def test_describe_known_chains():
    assert describe(BASE_CHAIN_ID).name == "Base"
    assert describe(BITCOIN_CHAIN_ID).native.decimals == 8
    assert describe(SOLANA_CHAIN_ID).native.address == "11111111111111111111111111111111"
    assert native_asset(SUI_CHAIN_ID).address == "0x2::sui::SUI"
    assert family_of(137) == ChainFamily.EVM
    assert describe(137).native.symbol == "POL"


def test_unknown_chain_is_configuration_error():
    with pytest.raises(UnknownChainError):
        describe(56)
    # LookupError, not a settlement failure
    with pytest.raises(LookupError):
        validate_address(999, "0x0")


def test_validate_address_uses_family_format():
    assert validate_address(1, "0x1234567890abcdef1234567890ABCDEF12345678") is True
    assert validate_address(1, "So11111111111111111111111111111111111111112") is False
    assert validate_address(SOLANA_CHAIN_ID, "So11111111111111111111111111111111111111112") is True
    assert validate_address(BITCOIN_CHAIN_ID, "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq") is True
    assert validate_address(SUI_CHAIN_ID, "0x2") is True


def test_native_asset_detection():
    assert is_native_asset(1, EVM_NATIVE_ADDRESS) is True
    assert is_native_asset(1, "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48") is False
    assert is_native_asset(BITCOIN_CHAIN_ID, "bitcoin") is True
    assert is_native_asset(SOLANA_CHAIN_ID, "So11111111111111111111111111111111111111112") is False


@pytest.mark.parametrize(
    "amount, decimals, expected",
    [
        ("1", 8, 100_000_000),
        ("1", 9, 1_000_000_000),
        ("0.1", 18, 100_000_000_000_000_000),
        ("0.01", 18, 10_000_000_000_000_000),
        ("0.000001", 6, 1),
    ],
)
def test_amount_conversion_is_exact(amount, decimals, expected):
    assert to_smallest_units(amount, decimals) == expected


def test_amount_conversion_rejects_excess_precision():
    with pytest.raises(InvalidTipRequest):
        to_smallest_units("0.0000001", 6)


@pytest.mark.parametrize("amount", ["0", "-1", "abc", "", "NaN", "1e999999"])
def test_amount_conversion_rejects_non_positive(amount):
    with pytest.raises(InvalidTipRequest):
        to_smallest_units(amount, 18)


def test_from_smallest_units():
    assert from_smallest_units(150_000_000, 8) == Decimal("1.5")
