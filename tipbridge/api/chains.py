from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Query

from ..core.chains import CHAINS, describe
from ..core.errors import UnknownChainError

router = APIRouter(prefix="/chains")


@router.get("")
async def list_chains() -> Dict[str, Any]:
    return {"chains": [descriptor.to_dict() for descriptor in CHAINS.values()]}


@router.get("/{chain_id}")
async def get_chain(chain_id: int) -> Dict[str, Any]:
    try:
        return describe(chain_id).to_dict()
    except UnknownChainError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{chain_id}/validate")
async def validate_chain_address(chain_id: int, address: str = Query(..., min_length=1)) -> Dict[str, Any]:
    try:
        descriptor = describe(chain_id)
    except UnknownChainError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"chainId": chain_id, "address": address, "valid": descriptor.validate_address(address)}
