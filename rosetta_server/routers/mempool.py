from fastapi import APIRouter, Depends

from ..dependencies import get_gateway
from ..models import (
    Error,
    MempoolResponse,
    MempoolTransactionRequest,
    MempoolTransactionResponse,
    NetworkRequest,
)
from ..services.gateway import RosettaGateway

router = APIRouter(
    prefix="/mempool",
    tags=["mempool"],
    responses={500: {"model": Error}}
)


@router.post("", response_model=MempoolResponse, response_model_exclude_none=True)
async def mempool(request: NetworkRequest, gateway: RosettaGateway = Depends(get_gateway)):
    return await gateway.mempool(request)


@router.post("/transaction", response_model=MempoolTransactionResponse, response_model_exclude_none=True)
async def mempool_transaction(request: MempoolTransactionRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    A transaction still in the mempool; TransactionNotFound once evicted.
    """
    return await gateway.mempool_transaction(request)
