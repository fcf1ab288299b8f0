"""
Quote client.

Turns a ``TipRequest`` into an aggregator route query and parses the answer
into a ``Quote``. Quotes are fetched once per attempt and never cached.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from ...config import settings
from ...providers.lifi import LifiProvider
from ..errors import QuoteFailed
from ..models import Quote, TipRequest, TransactionPayload


logger = logging.getLogger(__name__)


def _parse_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Quote numbers arrive as decimal strings or 0x-prefixed hex."""
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.lower().startswith("0x") else int(text)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)[:200]
    return str(body)[:200]


class QuoteClient:
    """Fetches executable routes from LI.FI with the integrator fee attached."""

    def __init__(
        self,
        provider: Optional[LifiProvider] = None,
        *,
        integrator: Optional[str] = None,
        fee: Optional[Decimal] = None,
        default_slippage: Optional[Decimal] = None,
        settlement_token: Optional[str] = None,
    ):
        self.provider = provider or LifiProvider()
        self.integrator = integrator or settings.lifi_integrator
        self.fee = settings.integrator_fee if fee is None else fee
        self.default_slippage = settings.default_slippage if default_slippage is None else default_slippage
        self.settlement_token = settlement_token or settings.settlement_token

    def build_params(self, request: TipRequest, slippage: Optional[Decimal] = None) -> Dict[str, Any]:
        if slippage is None:
            slippage = request.slippage if request.slippage is not None else self.default_slippage
        return {
            "fromChain": str(request.sender_chain_id),
            "toChain": str(request.recipient_chain_id),
            "fromToken": request.asset.address,
            "toToken": self.settlement_token,
            "toAddress": request.recipient_address,
            "fromAmount": str(request.amount_in_smallest_units),
            "fromAddress": request.sender_address,
            "integrator": self.integrator,
            "fee": str(self.fee),
            "slippage": str(slippage),
        }

    async def get_quote(self, request: TipRequest, slippage: Optional[Decimal] = None) -> Quote:
        """Fetch and parse a route for ``request``.

        Raises:
            QuoteFailed: non-2xx, transport error, or no executable payload.
        """
        params = self.build_params(request, slippage)
        logger.info(
            f"Requesting quote {params['fromChain']}:{params['fromToken']} -> "
            f"{params['toChain']}:{params['toToken']} amount={params['fromAmount']}"
        )

        try:
            data = await self.provider.quote(params)
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            raise QuoteFailed(
                f"Quote request failed ({exc.response.status_code}): {detail}",
                user_message=detail or "Failed to fetch quote",
                status_code=exc.response.status_code,
                chain_id=request.sender_chain_id,
            ) from exc
        except httpx.HTTPError as exc:
            raise QuoteFailed(
                f"Quote request failed: {exc}",
                user_message="Failed to fetch quote",
                chain_id=request.sender_chain_id,
            ) from exc
        except ValueError as exc:
            raise QuoteFailed(f"Quote response was not JSON: {exc}", chain_id=request.sender_chain_id) from exc

        return self.parse(data, request)

    def parse(self, data: Dict[str, Any], request: TipRequest) -> Quote:
        if not isinstance(data, dict):
            raise QuoteFailed("Quote response is not an object", chain_id=request.sender_chain_id)

        tx = data.get("transactionRequest") or {}
        if not tx.get("data"):
            raise QuoteFailed(
                "Quote has no executable payload (transactionRequest.data missing)",
                user_message="No route found for this tip",
                chain_id=request.sender_chain_id,
            )

        action = data.get("action") or {}
        estimate = data.get("estimate") or {}
        destination = action.get("toAddress")
        if not destination:
            raise QuoteFailed(
                "Quote does not state a destination address",
                chain_id=request.sender_chain_id,
            )

        try:
            payload = TransactionPayload(
                data=tx["data"],
                to=tx.get("to"),
                value=_parse_int(tx.get("value"), 0),
                chain_id=_parse_int(tx.get("chainId")),
            )
            from_amount = _parse_int(
                estimate.get("fromAmount") or action.get("fromAmount"),
                request.amount_in_smallest_units,
            )
            to_amount = _parse_int(estimate.get("toAmount"))
        except (TypeError, ValueError) as exc:
            raise QuoteFailed(f"Malformed quote amounts: {exc}", chain_id=request.sender_chain_id) from exc

        return Quote(
            from_chain_id=_parse_int(action.get("fromChainId"), request.sender_chain_id),
            to_chain_id=_parse_int(action.get("toChainId"), request.recipient_chain_id),
            from_token=(action.get("fromToken") or {}).get("address") or request.asset.address,
            to_token=(action.get("toToken") or {}).get("address") or self.settlement_token,
            from_address=action.get("fromAddress") or request.sender_address,
            destination_address=destination,
            from_amount=from_amount,
            payload=payload,
            # Older responses only carry the router in transactionRequest.to
            approval_address=estimate.get("approvalAddress") or tx.get("to"),
            to_amount_estimate=to_amount,
            tool=data.get("tool"),
            quote_id=data.get("id"),
            raw_response=data,
        )


def ensure_destination(quote: Quote, request: TipRequest) -> None:
    """Reject a route that pays anyone but the requested recipient.

    Exact string comparison: the quote must echo the address we asked for.
    """
    if quote.destination_address != request.recipient_address:
        logger.error(
            f"Quote destination mismatch: expected {request.recipient_address}, "
            f"got {quote.destination_address}"
        )
        raise QuoteFailed(
            "Quote destination does not match the recipient",
            user_message="Quote destination does not match the recipient. Tip cancelled.",
            chain_id=request.sender_chain_id,
        )


__all__ = ["QuoteClient", "ensure_destination"]
