from typing import Any, Dict

from fastapi import APIRouter

from ..config import settings
from ..core.chains import CHAINS, SUI_CHAIN_ID, validate_address

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Report which settlement paths are configured."""

    checks = {
        "settlement_chain": settings.settlement_chain_id in CHAINS,
        "lifi_api_key": settings.has_lifi_key,
        "alchemy_api_key": settings.has_alchemy_key,
        "backend_api_url": bool(settings.backend_api_url),
        "streamer_id": bool(settings.streamer_id),
        "sui_settlement_address": bool(settings.sui_settlement_address)
        and validate_address(SUI_CHAIN_ID, settings.sui_settlement_address),
    }

    # API keys only raise rate limits; public endpoints still work without them
    required = ("settlement_chain", "backend_api_url")
    healthy = all(checks[name] for name in required)

    return {
        "status": "healthy" if healthy else "degraded",
        "checks": checks,
        "settlement_chain_id": settings.settlement_chain_id,
    }
