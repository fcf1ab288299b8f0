"""Async client for LI.FI's public quote API."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..config import settings


class LifiProvider:
    """Thin wrapper around https://li.quest/v1 endpoints."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.lifi_base_url).rstrip("/")
        self.api_key = settings.lifi_api_key if api_key is None else api_key
        self.timeout_s = timeout_s or settings.quote_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "accept": "application/json",
            "user-agent": "TipbridgeLifiClient/2026-10",
        }
        if self.api_key:
            headers["x-lifi-api-key"] = self.api_key
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, params=params, headers=self._headers())
            response.raise_for_status()
            return response

    async def quote(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Request a route quote.

        ``params`` follows https://docs.li.fi/ (fromChain, toChain, fromToken,
        toToken, fromAmount, fromAddress, toAddress, integrator, fee, slippage).
        """

        resp = await self._request("GET", "/quote", params=params)
        return resp.json()

    async def status(self, tx_hash: str, *, from_chain: Optional[int] = None, to_chain: Optional[int] = None) -> Dict[str, Any]:
        """Cross-chain transfer status for a source transaction hash."""

        params: Dict[str, Any] = {"txHash": tx_hash}
        if from_chain is not None:
            params["fromChain"] = from_chain
        if to_chain is not None:
            params["toChain"] = to_chain
        resp = await self._request("GET", "/status", params=params)
        return resp.json()
