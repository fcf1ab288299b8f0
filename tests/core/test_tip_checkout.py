import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from conftest import EVM_SENDER, RECIPIENT, DummyEvmProvider
from tipbridge.core.checkout import FAILED_MESSAGE, REJECTED_STATUS, TipCheckout
from tipbridge.core.errors import ApprovalFailed, QuoteFailed, UserRejected
from tipbridge.core.models import Asset, ExecutionResult
from tipbridge.core.wallets import EvmWalletAdapter
from tipbridge.providers.backend import LedgerClient


RESULT = ExecutionResult(
    tx_id="0xabc",
    source_chain_id=42161,
    destination_chain_id=8453,
    source_address=EVM_SENDER,
    destination_address=RECIPIENT,
    asset_symbol="ETH",
    amount="0.01",
    message="gg",
    display_name="viewer",
)


def _engine(settle):
    return SimpleNamespace(
        settle=settle,
        identity=SimpleNamespace(cached=Mock(return_value=None)),
    )


def _checkout(engine, ledger=None, **kwargs):
    if ledger is None:
        ledger = AsyncMock()
        ledger.notify.return_value = True
    return TipCheckout(
        engine,
        EvmWalletAdapter(DummyEvmProvider(), address=EVM_SENDER),
        recipient_address=RECIPIENT,
        recipient_chain_id=8453,
        streamer_id="streamer",
        ledger=ledger,
        **kwargs,
    )


async def _submit(checkout, amount="0.01"):
    return await checkout.submit(
        sender_chain_id=42161,
        asset=Asset.native(42161),
        amount=amount,
        message="gg",
        display_name="viewer",
    )


@pytest.mark.asyncio
async def test_success_clears_fields_and_records_tip():
    on_success = AsyncMock()
    checkout = _checkout(_engine(AsyncMock(return_value=RESULT)), on_success=on_success)

    result = await _submit(checkout)

    assert result is RESULT
    on_success.assert_awaited_once_with(RESULT)
    checkout.ledger.notify.assert_awaited_once_with(RESULT, "streamer", session=None)
    assert checkout.amount == ""
    assert checkout.message == ""
    assert checkout.display_name == "viewer"
    assert checkout.busy is False


@pytest.mark.asyncio
async def test_second_submit_ignored_while_busy():
    gate = asyncio.Event()

    async def slow_settle(request, wallet, on_status):
        on_status("Fetching quote from LI.FI (with 1% fee)...")
        await gate.wait()
        return RESULT

    settle = AsyncMock(side_effect=slow_settle)
    checkout = _checkout(_engine(settle))

    task = asyncio.create_task(_submit(checkout))
    await asyncio.sleep(0)

    assert checkout.busy is True
    assert checkout.status.startswith("Fetching quote")
    assert await _submit(checkout) is None

    gate.set()
    assert await task is RESULT
    assert settle.await_count == 1
    assert checkout.busy is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [UserRejected(), ApprovalFailed("approval rejected", rejected=True)],
)
async def test_rejection_sets_status_and_skips_ledger(error):
    checkout = _checkout(_engine(AsyncMock(side_effect=error)))

    assert await _submit(checkout) is None

    assert checkout.status == REJECTED_STATUS
    assert checkout.error == ""
    assert checkout.amount == "0.01"
    checkout.ledger.notify.assert_not_awaited()
    assert checkout.busy is False


@pytest.mark.asyncio
async def test_failure_shows_user_message():
    error = QuoteFailed("no route", user_message="No route found for this tip")
    checkout = _checkout(_engine(AsyncMock(side_effect=error)))

    assert await _submit(checkout) is None

    assert checkout.error == "No route found for this tip"
    assert checkout.status == ""
    checkout.ledger.notify.assert_not_awaited()


@pytest.mark.asyncio
async def test_unexpected_error_sets_generic_message():
    checkout = _checkout(_engine(AsyncMock(side_effect=RuntimeError("decoder crashed"))))

    assert await _submit(checkout) is None

    assert checkout.error == FAILED_MESSAGE
    assert checkout.status == ""
    assert checkout.amount == "0.01"
    assert checkout.busy is False
    checkout.ledger.notify.assert_not_awaited()


@pytest.mark.asyncio
async def test_broken_success_callback_still_records_tip():
    on_success = AsyncMock(side_effect=RuntimeError("overlay offline"))
    checkout = _checkout(_engine(AsyncMock(return_value=RESULT)), on_success=on_success)

    assert await _submit(checkout) is RESULT

    checkout.ledger.notify.assert_awaited_once_with(RESULT, "streamer", session=None)
    assert checkout.amount == ""
    assert checkout.error == ""
    assert checkout.busy is False


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "1e999999"])
async def test_invalid_amount_never_reaches_engine(amount):
    settle = AsyncMock()
    checkout = _checkout(_engine(settle))

    assert await _submit(checkout, amount=amount) is None

    assert checkout.error
    settle.assert_not_awaited()
    assert checkout.busy is False


@pytest.mark.asyncio
async def test_ledger_outage_does_not_undo_tip():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    ledger = LedgerClient(base_url="https://backend.test", transport=httpx.MockTransport(handler))
    checkout = _checkout(_engine(AsyncMock(return_value=RESULT)), ledger=ledger)

    assert await _submit(checkout) is RESULT
    assert checkout.amount == ""
