"""Shared fakes for wallet, RPC and aggregator interactions."""

import base64
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from tipbridge.core.chains import EVM_NATIVE_ADDRESS
from tipbridge.providers.evm_rpc import TransactionReceipt


EVM_SENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
ROUTER = "0x3333333333333333333333333333333333333333"
USDC_ARBITRUM = "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"
SUI_SETTLEMENT = "0x2ccd4a37d0ac0ed8fb45a9ec7fa5cd6d10bd7d06bc6e2e31aa6a2d19f7aa0e4f"


class ProviderRpcError(Exception):
    """EIP-1193 style provider error."""

    def __init__(self, message: str, code: int):
        super().__init__(message)
        self.code = code


class DummyEvmProvider:
    """Injected-provider stand-in recording every request."""

    def __init__(self, events: Optional[List] = None, chain_id: int = 42161, accounts: Optional[List[str]] = None):
        self.events = events if events is not None else []
        self.chain_id = chain_id
        self.accounts = accounts if accounts is not None else [EVM_SENDER]
        self.errors: Dict[str, Exception] = {}
        self.calls: List[str] = []
        self.sent: List[Dict[str, Any]] = []

    async def request(self, method: str, params: List[Any]) -> Any:
        self.calls.append(method)
        if method in self.errors:
            raise self.errors[method]
        if method in ("eth_requestAccounts", "eth_accounts"):
            return self.accounts
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "wallet_switchEthereumChain":
            self.chain_id = int(params[0]["chainId"], 16)
            self.events.append(("switch", self.chain_id))
            return None
        if method == "personal_sign":
            return "0x" + "11" * 65
        if method == "eth_sendTransaction":
            self.sent.append(params[0])
            tx_hash = "0x" + format(len(self.sent), "064x")
            self.events.append(("send", tx_hash))
            return tx_hash
        raise AssertionError(f"unexpected provider method {method}")


class DummyEvmRpc:
    """Read-side RPC stand-in; receipts are recorded in ``events``."""

    def __init__(self, events: List, *, allowance: int = 0, gas_price: int = 100, receipt_status: int = 1):
        self.events = events
        self.receipt_status = receipt_status
        self.get_allowance = AsyncMock(return_value=allowance)
        self.get_gas_price = AsyncMock(return_value=gas_price)
        self.wait_for_receipt = AsyncMock(side_effect=self._wait)

    async def _wait(self, chain_id: int, tx_hash: str, *, timeout_s: float, poll_interval_s=None) -> TransactionReceipt:
        self.events.append(("receipt", tx_hash))
        return TransactionReceipt(tx_hash=tx_hash, status=self.receipt_status, block_number=1, gas_used=21000)


class DummySolanaWallet:
    def __init__(self, keypair: Optional[Keypair] = None):
        self.keypair = keypair or Keypair()
        self.public_key = self.keypair.pubkey()

    async def sign_message(self, message: bytes) -> bytes:
        return bytes(self.keypair.sign_message(message))

    async def sign_transaction(self, tx: VersionedTransaction) -> VersionedTransaction:
        return VersionedTransaction(tx.message, [self.keypair])


def build_versioned_tx(payer: Keypair) -> str:
    """Base64 versioned transfer transaction, as the aggregator would return it."""
    ix = transfer(TransferParams(from_pubkey=payer.pubkey(), to_pubkey=Keypair().pubkey(), lamports=1_000))
    message = MessageV0.try_compile(payer.pubkey(), [ix], [], Hash.default())
    tx = VersionedTransaction(message, [payer])
    return base64.b64encode(bytes(tx)).decode("ascii")


def make_lifi_response(
    *,
    from_chain: int = 42161,
    to_chain: int = 8453,
    from_token: str = EVM_NATIVE_ADDRESS,
    to_token: str = EVM_NATIVE_ADDRESS,
    from_address: str = EVM_SENDER,
    to_address: Optional[str] = RECIPIENT,
    from_amount: str = "10000000000000000",
    value: str = "10000000000000000",
    data: Optional[str] = "0xdeadbeef",
    to: Optional[str] = ROUTER,
    approval_address: Optional[str] = ROUTER,
) -> Dict[str, Any]:
    action: Dict[str, Any] = {
        "fromChainId": from_chain,
        "toChainId": to_chain,
        "fromToken": {"address": from_token},
        "toToken": {"address": to_token},
        "fromAddress": from_address,
        "fromAmount": from_amount,
    }
    if to_address is not None:
        action["toAddress"] = to_address
    tx: Dict[str, Any] = {"value": value}
    if data is not None:
        tx["data"] = data
    if to is not None:
        tx["to"] = to
    return {
        "id": "quote-1",
        "tool": "across",
        "action": action,
        "estimate": {
            "fromAmount": from_amount,
            "toAmount": "9900000000000000",
            "approvalAddress": approval_address,
        },
        "transactionRequest": tx,
    }


@pytest.fixture
def events() -> List:
    return []


@pytest.fixture
def evm_provider(events) -> DummyEvmProvider:
    return DummyEvmProvider(events)


@pytest.fixture
def lifi_response():
    return make_lifi_response
