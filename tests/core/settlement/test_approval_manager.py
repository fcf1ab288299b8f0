from unittest.mock import AsyncMock

import pytest

from conftest import EVM_SENDER, ROUTER, USDC_ARBITRUM, DummyEvmRpc, ProviderRpcError
from tipbridge.core.chains import EVM_NATIVE_ADDRESS
from tipbridge.core.errors import ApprovalFailed
from tipbridge.core.settlement.approval import ApprovalManager
from tipbridge.core.wallets.evm import EvmWalletAdapter
from tipbridge.providers.evm_rpc import ERC20_APPROVE_SELECTOR, EvmRpcError, ReceiptTimeoutError


def _ensure(manager, wallet, statuses=None, token=USDC_ARBITRUM, required=5_000_000):
    return manager.ensure_allowance(
        wallet,
        owner=EVM_SENDER,
        spender=ROUTER,
        token=token,
        required=required,
        chain_id=42161,
        symbol="USDC",
        on_status=(statuses.append if statuses is not None else print),
    )


@pytest.mark.asyncio
async def test_insufficient_allowance_sends_one_approval_and_waits(events, evm_provider):
    rpc = DummyEvmRpc(events, allowance=0)
    wallet = EvmWalletAdapter(evm_provider, address=EVM_SENDER)
    statuses = []

    approve_hash = await _ensure(ApprovalManager(rpc, receipt_timeout_s=5), wallet, statuses)

    assert len(evm_provider.sent) == 1
    approve_tx = evm_provider.sent[0]
    assert approve_tx["to"] == USDC_ARBITRUM
    assert approve_tx["data"].startswith(ERC20_APPROVE_SELECTOR)
    assert approve_tx["data"].endswith(format(5_000_000, "064x"))
    assert approve_tx["value"] == "0x0"
    assert events == [("send", approve_hash), ("receipt", approve_hash)]
    assert statuses == [
        "Approving USDC...",
        "Waiting for Approval Confirmation...",
        "Approved! Initiating Bridge Transaction...",
    ]


@pytest.mark.asyncio
async def test_sufficient_allowance_sends_nothing(events, evm_provider):
    rpc = DummyEvmRpc(events, allowance=5_000_000)
    wallet = EvmWalletAdapter(evm_provider, address=EVM_SENDER)

    assert await _ensure(ApprovalManager(rpc), wallet) is None
    assert evm_provider.sent == []
    rpc.get_allowance.assert_awaited_once_with(42161, USDC_ARBITRUM, EVM_SENDER, ROUTER)


@pytest.mark.asyncio
async def test_native_asset_needs_no_allowance(events, evm_provider):
    rpc = DummyEvmRpc(events)
    wallet = EvmWalletAdapter(evm_provider, address=EVM_SENDER)

    assert await _ensure(ApprovalManager(rpc), wallet, token=EVM_NATIVE_ADDRESS) is None
    rpc.get_allowance.assert_not_awaited()
    assert evm_provider.sent == []


@pytest.mark.asyncio
async def test_rejected_approval_is_flagged(events, evm_provider):
    evm_provider.errors["eth_sendTransaction"] = ProviderRpcError("User rejected the request.", 4001)
    rpc = DummyEvmRpc(events)
    wallet = EvmWalletAdapter(evm_provider, address=EVM_SENDER)

    with pytest.raises(ApprovalFailed) as exc_info:
        await _ensure(ApprovalManager(rpc), wallet)

    assert exc_info.value.rejected is True
    assert exc_info.value.user_message == "Request rejected"
    rpc.wait_for_receipt.assert_not_awaited()


@pytest.mark.asyncio
async def test_reverted_approval_fails_with_hash(events, evm_provider):
    rpc = DummyEvmRpc(events, receipt_status=0)
    wallet = EvmWalletAdapter(evm_provider, address=EVM_SENDER)

    with pytest.raises(ApprovalFailed) as exc_info:
        await _ensure(ApprovalManager(rpc), wallet)

    assert exc_info.value.rejected is False
    assert exc_info.value.tx_id == "0x" + format(1, "064x")


@pytest.mark.asyncio
async def test_approval_receipt_timeout(events, evm_provider):
    rpc = DummyEvmRpc(events)
    rpc.wait_for_receipt = AsyncMock(side_effect=ReceiptTimeoutError("slow"))
    wallet = EvmWalletAdapter(evm_provider, address=EVM_SENDER)

    with pytest.raises(ApprovalFailed) as exc_info:
        await _ensure(ApprovalManager(rpc, receipt_timeout_s=1), wallet)

    assert exc_info.value.tx_id is not None
    assert "too long" in exc_info.value.user_message


@pytest.mark.asyncio
async def test_allowance_read_failure(events, evm_provider):
    rpc = DummyEvmRpc(events)
    rpc.get_allowance = AsyncMock(side_effect=EvmRpcError("node down"))
    wallet = EvmWalletAdapter(evm_provider, address=EVM_SENDER)

    with pytest.raises(ApprovalFailed):
        await _ensure(ApprovalManager(rpc), wallet)
    assert evm_provider.sent == []
