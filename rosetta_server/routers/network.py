"""
Network endpoints: supported networks, options and status.
"""
from fastapi import APIRouter, Depends

from ..dependencies import get_gateway
from ..models import (
    Error,
    MetadataRequest,
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkRequest,
    NetworkStatusResponse,
)
from ..services.gateway import RosettaGateway

router = APIRouter(
    prefix="/network",
    tags=["network"],
    responses={500: {"model": Error}}
)


@router.post("/list", response_model=NetworkListResponse, response_model_exclude_none=True)
async def network_list(request: MetadataRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    List the networks served by this process.
    """
    return await gateway.network_list()


@router.post("/options", response_model=NetworkOptionsResponse, response_model_exclude_none=True)
async def network_options(request: NetworkRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Version information, operation types and the error catalogue.
    """
    return await gateway.network_options(request)


@router.post("/status", response_model=NetworkStatusResponse, response_model_exclude_none=True)
async def network_status(request: NetworkRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Current tip, genesis block and peers. Never cached.
    """
    return await gateway.network_status(request)
