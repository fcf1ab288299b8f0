from tipbridge.services.address import (
    is_valid_bitcoin_address,
    is_valid_evm_address,
    is_valid_solana_address,
    is_valid_sui_address,
    shorten_address,
)


def test_address_validation_evm():
    address = "0x1234567890abcdef1234567890ABCDEF12345678"
    assert is_valid_evm_address(address) is True
    assert is_valid_evm_address(address[:-1]) is False
    assert is_valid_evm_address("") is False


def test_address_validation_solana():
    solana_address = "So11111111111111111111111111111111111111112"
    assert is_valid_solana_address(solana_address) is True
    assert is_valid_solana_address("O0lNotBase58") is False


def test_address_validation_bitcoin():
    assert is_valid_bitcoin_address("1BvBMSEYstWetqTFn5Au4m4GFg7xJaNVN2") is True
    assert is_valid_bitcoin_address("3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy") is True
    assert is_valid_bitcoin_address("bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq") is True
    assert is_valid_bitcoin_address("tb1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq") is False


def test_address_validation_sui():
    sui_address = "0x2ccd4a37d0ac0ed8fb45a9ec7fa5cd6d10bd7d06bc6e2e31aa6a2d19f7aa0e4f"
    assert is_valid_sui_address(sui_address) is True
    assert is_valid_sui_address("0x" + "a" * 65) is False
    assert is_valid_sui_address("2ccd") is False


def test_shorten_address():
    assert shorten_address("0x1234567890abcdef1234567890ABCDEF12345678") == "0x1234...5678"
    assert shorten_address("0x2") == "0x2"
