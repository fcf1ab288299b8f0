from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from ..config import settings
from ..core.chains import ChainFamily
from ..core.errors import InvalidTipRequest, QuoteFailed
from ..core.models import Asset, GasTier, Quote, TipRequest
from ..core.settlement.quote import QuoteClient, ensure_destination
from ..providers.lifi import LifiProvider

router = APIRouter(prefix="/tips")


class AssetModel(BaseModel):
    symbol: str = Field(..., description="Display symbol, e.g. USDC")
    address: str = Field(..., description="Token address or the chain's native sentinel")
    decimals: int = Field(..., ge=0, le=36)


class TipQuoteRequest(BaseModel):
    senderChainId: int = Field(..., description="Chain the tip is sent from")
    senderAddress: str = Field(..., description="Sender wallet address")
    asset: AssetModel
    amount: str = Field(..., description="Amount in human units, e.g. '0.01'")
    recipientAddress: str = Field(..., description="Streamer payout address on the settlement chain")
    recipientChainId: Optional[int] = Field(default=None, description="Defaults to the configured settlement chain")
    message: str = ""
    displayName: Optional[str] = None
    gasTier: GasTier = GasTier.AUTO
    slippage: Optional[Decimal] = Field(default=None, description="Fraction, e.g. 0.005")

    def to_tip_request(self) -> TipRequest:
        return TipRequest(
            sender_chain_id=self.senderChainId,
            sender_address=self.senderAddress,
            asset=Asset(symbol=self.asset.symbol, address=self.asset.address, decimals=self.asset.decimals),
            amount=self.amount,
            recipient_address=self.recipientAddress,
            recipient_chain_id=self.recipientChainId or settings.settlement_chain_id,
            message=self.message,
            display_name=self.displayName,
            gas_tier=self.gasTier,
            slippage=self.slippage,
        )


def _quote_to_dict(quote: Quote) -> Dict[str, Any]:
    return {
        "fromChainId": quote.from_chain_id,
        "toChainId": quote.to_chain_id,
        "fromToken": quote.from_token,
        "toToken": quote.to_token,
        "fromAddress": quote.from_address,
        "destinationAddress": quote.destination_address,
        "fromAmount": str(quote.from_amount),
        "toAmountEstimate": str(quote.to_amount_estimate) if quote.to_amount_estimate is not None else None,
        "approvalAddress": quote.approval_address,
        "tool": quote.tool,
        "quoteId": quote.quote_id,
        "transactionRequest": {
            "to": quote.payload.to,
            "data": quote.payload.data,
            "value": str(quote.payload.value),
        },
    }


@router.post("/quote")
async def tip_quote(body: TipQuoteRequest) -> Dict[str, Any]:
    """Preview the route a tip would take. Nothing is signed."""

    try:
        request = body.to_tip_request()
    except InvalidTipRequest as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    if request.family == ChainFamily.SUI:
        raise HTTPException(
            status_code=400,
            detail="Sui tips transfer to a fixed settlement address and have no route to preview",
        )

    client = QuoteClient()
    try:
        quote = await client.get_quote(request)
        ensure_destination(quote, request)
    except QuoteFailed as exc:
        raise HTTPException(status_code=502, detail=exc.user_message)

    return {
        "success": True,
        "fromAmount": str(request.amount_in_smallest_units),
        "quote": _quote_to_dict(quote),
    }


@router.get("/status/{tx_hash}")
async def tip_status(
    tx_hash: str,
    fromChain: Optional[int] = Query(default=None),
    toChain: Optional[int] = Query(default=None),
) -> Dict[str, Any]:
    """Cross-chain delivery status of a sent tip."""

    provider = LifiProvider()
    try:
        data = await provider.status(tx_hash, from_chain=fromChain, to_chain=toChain)
        return {"success": True, "status": data}
    except httpx.HTTPStatusError as exc:
        detail = exc.response.text or exc.response.reason_phrase
        raise HTTPException(status_code=exc.response.status_code, detail=detail)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to fetch tip status: {exc}")
