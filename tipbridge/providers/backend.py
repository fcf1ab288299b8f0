"""
Backend API clients: wallet login and the tip ledger.

The backend issues session tokens for signed identity messages and records
settled tips for the streamer's history. Neither call moves funds.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

from ..config import settings
from ..core.models import ExecutionResult

if TYPE_CHECKING:
    from ..core.identity import WalletSession


logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Backend call failed or returned an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class _BackendClient:
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.backend_api_url).rstrip("/")
        self.timeout_s = timeout_s or settings.backend_timeout_seconds
        self._transport = transport

    async def _post(
        self,
        path: str,
        body: Dict[str, Any],
        *,
        token: Optional[str] = None,
    ) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=self._transport,
        ) as client:
            return await client.post(path, json=body, headers=headers)


class AuthClient(_BackendClient):
    """``POST /auth/wallet-login`` with a signed identity message."""

    async def wallet_login(self, address: str, timestamp: int, signature: str) -> Dict[str, Any]:
        try:
            response = await self._post(
                "/auth/wallet-login",
                {"address": address, "timestamp": timestamp, "signature": signature},
            )
        except httpx.HTTPError as exc:
            raise BackendError(f"wallet-login request failed: {exc}") from exc

        if response.status_code >= 400:
            raise BackendError(
                f"wallet-login returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError("wallet-login returned a non-JSON body") from exc


class LedgerClient(_BackendClient):
    """Fire-and-forget tip records (``POST /api/tip``)."""

    async def notify(
        self,
        result: ExecutionResult,
        streamer_id: str,
        session: Optional["WalletSession"] = None,
    ) -> bool:
        """Record a settled tip. Never raises; returns whether the backend accepted it.

        The tip has already settled on-chain by the time this runs, so a
        ledger outage only costs the history entry.
        """
        payload = result.to_ledger_payload(streamer_id)
        token = session.token if session is not None else None
        try:
            response = await self._post("/api/tip", payload, token=token)
        except Exception as exc:
            logger.error(f"Failed to record tip {result.tx_id}: {exc}")
            return False

        if response.status_code >= 400:
            logger.error(
                f"Ledger rejected tip {result.tx_id}: "
                f"{response.status_code} {response.text[:200]}"
            )
            return False

        logger.info(f"Recorded tip {result.tx_id} for {streamer_id}")
        return True


__all__ = ["AuthClient", "BackendError", "LedgerClient"]
