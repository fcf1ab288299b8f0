"""
Read-side JSON-RPC client for EVM chains.

Covers what the settlement flow needs without a signer: allowance reads,
the current gas price, and bounded receipt polling. Writes always go through
the connected wallet.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import httpx

from ..config import settings


logger = logging.getLogger(__name__)

ERC20_ALLOWANCE_SELECTOR = "0xdd62ed3e"  # allowance(address,address)
ERC20_APPROVE_SELECTOR = "0x095ea7b3"  # approve(address,uint256)


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    addr = address.lower().replace("0x", "")
    return addr.zfill(64)


def encode_allowance_call(owner: str, spender: str) -> str:
    return ERC20_ALLOWANCE_SELECTOR + _encode_address(owner) + _encode_address(spender)


def encode_approve_call(spender: str, amount: int) -> str:
    return ERC20_APPROVE_SELECTOR + _encode_address(spender) + _encode_uint256(amount)


class EvmRpcError(Exception):
    """JSON-RPC call failed."""
    pass


class ReceiptTimeoutError(EvmRpcError):
    """No receipt observed within the allowed time."""
    pass


@dataclass
class TransactionReceipt:
    tx_hash: str
    status: int
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class EvmRpcClient:
    """JSON-RPC access to the EVM chains in the registry."""

    def __init__(
        self,
        rpc_urls: Optional[Dict[int, str]] = None,
        *,
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        url_resolver: Optional[Callable[[int], str]] = None,
    ):
        self._rpc_urls = dict(rpc_urls or {})
        self._url_resolver = url_resolver or settings.resolve_evm_rpc_url
        self.timeout_s = timeout_s
        self._transport = transport

    def _url_for(self, chain_id: int) -> str:
        url = self._rpc_urls.get(chain_id) or self._url_resolver(chain_id)
        if not url:
            raise ValueError(f"No RPC URL configured for chain {chain_id}")
        return url

    async def _rpc_call(
        self,
        chain_id: int,
        method: str,
        params: List[Any],
    ) -> Any:
        """Make an RPC call to the chain."""
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": 1,
        }

        url = self._url_for(chain_id)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPError as exc:
            raise EvmRpcError(f"{method} failed: {exc}") from exc
        except ValueError as exc:
            raise EvmRpcError(f"{method} returned a non-JSON body") from exc

        if not isinstance(result, dict):
            raise EvmRpcError(f"{method} returned an unexpected body: {result!r}")
        if "error" in result:
            raise EvmRpcError(f"RPC error: {result['error']}")

        return result.get("result")

    async def get_allowance(self, chain_id: int, token: str, owner: str, spender: str) -> int:
        result = await self._rpc_call(
            chain_id,
            "eth_call",
            [{"to": token, "data": encode_allowance_call(owner, spender)}, "latest"],
        )
        return int(result or "0x0", 16)

    async def get_gas_price(self, chain_id: int) -> int:
        result = await self._rpc_call(chain_id, "eth_gasPrice", [])
        if not result:
            raise EvmRpcError(f"eth_gasPrice returned no result on chain {chain_id}")
        return int(result, 16)

    async def get_receipt(self, chain_id: int, tx_hash: str) -> Optional[TransactionReceipt]:
        receipt = await self._rpc_call(chain_id, "eth_getTransactionReceipt", [tx_hash])
        if not receipt:
            return None
        return TransactionReceipt(
            tx_hash=tx_hash,
            # Pre-Byzantium receipts carry no status; treat as success
            status=int(receipt.get("status", "0x1"), 16),
            block_number=int(receipt["blockNumber"], 16) if receipt.get("blockNumber") else None,
            gas_used=int(receipt["gasUsed"], 16) if receipt.get("gasUsed") else None,
        )

    async def wait_for_receipt(
        self,
        chain_id: int,
        tx_hash: str,
        *,
        timeout_s: float,
        poll_interval_s: Optional[float] = None,
    ) -> TransactionReceipt:
        """Poll for a receipt until it appears or ``timeout_s`` elapses."""
        interval = settings.receipt_poll_interval_seconds if poll_interval_s is None else poll_interval_s
        deadline = time.monotonic() + timeout_s

        while True:
            try:
                receipt = await self.get_receipt(chain_id, tx_hash)
            except EvmRpcError as e:
                # Transient read failure; keep polling until the deadline
                logger.warning(f"Error checking transaction status: {e}")
                receipt = None

            if receipt is not None:
                logger.info(
                    f"Transaction mined: {tx_hash} "
                    f"(block {receipt.block_number}, status {receipt.status})"
                )
                return receipt

            if time.monotonic() >= deadline:
                raise ReceiptTimeoutError(f"No receipt for {tx_hash} after {timeout_s}s")

            await asyncio.sleep(interval)


__all__ = [
    "ERC20_ALLOWANCE_SELECTOR",
    "ERC20_APPROVE_SELECTOR",
    "encode_allowance_call",
    "encode_approve_call",
    "EvmRpcClient",
    "EvmRpcError",
    "ReceiptTimeoutError",
    "TransactionReceipt",
]
