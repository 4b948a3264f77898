from fastapi import APIRouter, Depends

from ..dependencies import get_gateway
from ..models import CallRequest, CallResponse, Error
from ..services.gateway import RosettaGateway

router = APIRouter(
    tags=["call"],
    responses={500: {"model": Error}}
)


@router.post("/call", response_model=CallResponse, response_model_exclude_none=True)
async def call(request: CallRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Chain specific read call, UnsupportedOperation when the connector offers none.
    """
    return await gateway.call(request)
