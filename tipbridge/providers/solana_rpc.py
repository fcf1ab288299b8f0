"""
Solana RPC client.

Submits wallet-signed transactions and polls their confirmation status.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx


class SolanaTransactionStatus(str, Enum):
    """Status of a Solana transaction."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"
    FAILED = "failed"
    EXPIRED = "expired"


@dataclass
class SolanaTransactionResult:
    """Result of a Solana transaction submission or status check."""
    signature: str
    status: SolanaTransactionStatus
    slot: Optional[int] = None
    error: Optional[Any] = None
    confirmations: Optional[int] = None


@dataclass
class SolanaRpcConfig:
    """Configuration for Solana RPC connection."""
    rpc_url: str
    commitment: str = "confirmed"
    max_retries: int = 3
    timeout_s: float = 30.0


class SolanaRpcError(Exception):
    """Error talking to the Solana RPC node."""
    pass


_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


class SolanaRpcClient:
    """
    JSON-RPC client for submitting and confirming Solana transactions.

    Usage:
        client = SolanaRpcClient(SolanaRpcConfig(
            rpc_url="https://api.mainnet-beta.solana.com"
        ))

        signature = await client.send_transaction(signed_tx_base64)
        result = await client.wait_for_confirmation(signature, timeout_s=60)
    """

    def __init__(
        self,
        config: SolanaRpcConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def commitment(self) -> str:
        return self._config.commitment

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout_s, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _rpc_call(
        self,
        method: str,
        params: List[Any],
        *,
        max_retries: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Make an RPC call to Solana node.

        Reads are retried on transport errors up to ``max_retries`` times
        (default from config); RPC-level errors are never retried.
        """
        client = await self._get_client()
        attempts = max(1, max_retries if max_retries is not None else self._config.max_retries)

        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }

        for attempt in range(attempts):
            try:
                response = await client.post(
                    self._config.rpc_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                if attempt == attempts - 1:
                    raise SolanaRpcError(f"HTTP error: {e.response.status_code}") from e
                await asyncio.sleep(0.5 * (attempt + 1))
                continue
            except httpx.RequestError as e:
                if attempt == attempts - 1:
                    raise SolanaRpcError(str(e)) from e
                await asyncio.sleep(0.5 * (attempt + 1))
                continue
            except ValueError as e:
                raise SolanaRpcError(f"{method} returned a non-JSON body") from e

            if not isinstance(data, dict):
                raise SolanaRpcError(f"{method} returned an unexpected body: {data!r}")
            if "error" in data:
                error = data["error"]
                error_msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
                raise SolanaRpcError(f"RPC error: {error_msg}")

            return data

        raise SolanaRpcError("Max retries exceeded")

    async def send_transaction(
        self,
        signed_transaction: str,
        skip_preflight: bool = False,
    ) -> str:
        """
        Send a signed transaction to the Solana network.

        Args:
            signed_transaction: Base64 encoded signed transaction
            skip_preflight: Skip preflight simulation

        Returns:
            Transaction signature (base58)
        """
        options = {
            "encoding": "base64",
            "skipPreflight": skip_preflight,
            "preflightCommitment": self._config.commitment,
        }

        # Submitted exactly once; a failed send is reported, not resent
        result = await self._rpc_call(
            "sendTransaction",
            [signed_transaction, options],
            max_retries=1,
        )

        signature = result.get("result")
        if not signature:
            raise SolanaRpcError("No signature returned from sendTransaction")
        return signature

    async def get_signature_status(
        self,
        signature: str,
    ) -> SolanaTransactionResult:
        """
        Get the current status of a transaction.

        Args:
            signature: Transaction signature (base58)

        Returns:
            SolanaTransactionResult with current status
        """
        result = await self._rpc_call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": True}],
        )

        values = (result.get("result") or {}).get("value") or [None]
        status = values[0]

        if status is None:
            # Not seen yet
            return SolanaTransactionResult(
                signature=signature,
                status=SolanaTransactionStatus.PENDING,
            )

        if status.get("err") is not None:
            return SolanaTransactionResult(
                signature=signature,
                status=SolanaTransactionStatus.FAILED,
                slot=status.get("slot"),
                error=status.get("err"),
            )

        reached = status.get("confirmationStatus") or "processed"
        if _COMMITMENT_RANK.get(reached, 0) < _COMMITMENT_RANK.get(self._config.commitment, 1):
            return SolanaTransactionResult(
                signature=signature,
                status=SolanaTransactionStatus.PENDING,
                slot=status.get("slot"),
                confirmations=status.get("confirmations"),
            )

        return SolanaTransactionResult(
            signature=signature,
            status=(
                SolanaTransactionStatus.FINALIZED
                if reached == "finalized"
                else SolanaTransactionStatus.CONFIRMED
            ),
            slot=status.get("slot"),
            confirmations=status.get("confirmations"),
        )

    async def wait_for_confirmation(
        self,
        signature: str,
        timeout_s: float = 60.0,
        poll_interval_s: float = 1.0,
    ) -> SolanaTransactionResult:
        """
        Wait for a transaction to be confirmed.

        Uses exponential backoff for polling.

        Returns:
            SolanaTransactionResult with final status; EXPIRED on timeout.
        """
        start_time = time.monotonic()
        interval = poll_interval_s

        while (time.monotonic() - start_time) < timeout_s:
            result = await self.get_signature_status(signature)

            if result.status in (
                SolanaTransactionStatus.CONFIRMED,
                SolanaTransactionStatus.FINALIZED,
                SolanaTransactionStatus.FAILED,
            ):
                return result

            await asyncio.sleep(interval)
            # Exponential backoff, max 5 seconds
            interval = min(interval * 1.5, 5.0)

        return SolanaTransactionResult(
            signature=signature,
            status=SolanaTransactionStatus.EXPIRED,
            error="Transaction confirmation timed out",
        )


# Singleton instance
_solana_rpc: Optional[SolanaRpcClient] = None


def get_solana_rpc(rpc_url: Optional[str] = None) -> SolanaRpcClient:
    """
    Get the singleton Solana RPC client.

    RPC URL resolution order:
    1. Explicit rpc_url parameter
    2. SOLANA_RPC_URL setting
    3. Alchemy Solana URL (built from ALCHEMY_API_KEY)
    4. Public Solana RPC (fallback, rate limited)
    """
    global _solana_rpc

    if _solana_rpc is None:
        from ..config import settings

        url = rpc_url or settings.resolve_solana_rpc_url()
        _solana_rpc = SolanaRpcClient(
            SolanaRpcConfig(rpc_url=url, commitment=settings.solana_commitment)
        )

    return _solana_rpc


__all__ = [
    "SolanaRpcClient",
    "SolanaRpcConfig",
    "SolanaTransactionResult",
    "SolanaTransactionStatus",
    "SolanaRpcError",
    "get_solana_rpc",
]
