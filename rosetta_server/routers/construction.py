"""
Construction endpoints.

Each stage is a stateless request/response pair; the caller carries the
state from one stage to the next.
"""
from fastapi import APIRouter, Depends

from ..dependencies import get_gateway
from ..models import (
    ConstructionCombineRequest,
    ConstructionCombineResponse,
    ConstructionDeriveRequest,
    ConstructionDeriveResponse,
    ConstructionHashRequest,
    ConstructionMetadataRequest,
    ConstructionMetadataResponse,
    ConstructionParseRequest,
    ConstructionParseResponse,
    ConstructionPayloadsRequest,
    ConstructionPayloadsResponse,
    ConstructionPreprocessRequest,
    ConstructionPreprocessResponse,
    ConstructionSubmitRequest,
    Error,
    TransactionIdentifierResponse,
)
from ..services.gateway import RosettaGateway

router = APIRouter(
    prefix="/construction",
    tags=["construction"],
    responses={500: {"model": Error}}
)


@router.post("/derive", response_model=ConstructionDeriveResponse, response_model_exclude_none=True)
async def derive(request: ConstructionDeriveRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Address of a public key.
    """
    return await gateway.derive(request)


@router.post("/preprocess", response_model=ConstructionPreprocessResponse, response_model_exclude_none=True)
async def preprocess(request: ConstructionPreprocessRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Options for the metadata call and the public keys that must sign.
    """
    return await gateway.preprocess(request)


@router.post("/metadata", response_model=ConstructionMetadataResponse, response_model_exclude_none=True)
async def metadata(request: ConstructionMetadataRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Live chain metadata such as nonce and fees. Never cached.
    """
    return await gateway.metadata(request)


@router.post("/payloads", response_model=ConstructionPayloadsResponse, response_model_exclude_none=True)
async def payloads(request: ConstructionPayloadsRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Unsigned transaction and the payloads to sign.
    """
    return await gateway.payloads(request)


@router.post("/combine", response_model=ConstructionCombineResponse, response_model_exclude_none=True)
async def combine(request: ConstructionCombineRequest, gateway: RosettaGateway = Depends(get_gateway)):
    return await gateway.combine(request)


@router.post("/parse", response_model=ConstructionParseResponse, response_model_exclude_none=True)
async def parse(request: ConstructionParseRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Operations of a signed or unsigned transaction, plus signers when signed.
    """
    return await gateway.parse(request)


@router.post("/hash", response_model=TransactionIdentifierResponse, response_model_exclude_none=True)
async def hash_transaction(request: ConstructionHashRequest, gateway: RosettaGateway = Depends(get_gateway)):
    return await gateway.hash(request)


@router.post("/submit", response_model=TransactionIdentifierResponse, response_model_exclude_none=True)
async def submit(request: ConstructionSubmitRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Broadcast a signed transaction. Never retried by the server.
    """
    return await gateway.submit(request)
