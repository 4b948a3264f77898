from fastapi import APIRouter, Depends

from ..dependencies import get_gateway
from ..models import (
    BlockRequest,
    BlockResponse,
    BlockTransactionRequest,
    BlockTransactionResponse,
    Error,
)
from ..services.gateway import RosettaGateway

router = APIRouter(
    prefix="/block",
    tags=["block"],
    responses={500: {"model": Error}}
)


@router.post("", response_model=BlockResponse, response_model_exclude_none=True)
async def block(request: BlockRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Block by index or hash; an empty identifier returns the tip.
    """
    return await gateway.block(request)


@router.post("/transaction", response_model=BlockTransactionResponse, response_model_exclude_none=True)
async def block_transaction(request: BlockTransactionRequest, gateway: RosettaGateway = Depends(get_gateway)):
    return await gateway.block_transaction(request)
